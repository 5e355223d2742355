# context.py
"""
运行时配置的数据模型
"""
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional
from config import GlobalConfig


@dataclass
class RunContext:
    """
    封装一次统计运行所需的所有配置和状态。
    这是从 CLI 传递到 Orchestrator 的唯一对象。
    """

    # --- 核心路径 ---
    repo_path: Optional[str]
    project_data_path: str

    # --- 统计范围 ---
    since_date: date
    until_date: date

    # --- 全局配置 ---
    # 包含所有常量和 .env 加载的数据
    global_config: GlobalConfig

    # --- 数据源参数 ---
    # 设置后从已保存的 diff 文本读取 ("-" 表示标准输入)，不再调用 git
    diff_file: Optional[str] = None
    # 为空时使用仓库当前分支
    branch: Optional[str] = None
    fetch: bool = True

    # --- 报告参数 ---
    output_format: str = "table"
    apply_file_filter: bool = True
    exclude_authors: List[str] = field(default_factory=list)

    # --- 标志 ---
    no_browser: bool = False

    @property
    def time_range_desc(self) -> str:
        if self.since_date == self.until_date:
            return self.since_date.isoformat()
        return f"{self.since_date.isoformat()} ~ {self.until_date.isoformat()}"
