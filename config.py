# config.py
"""
[V1.0] 全局配置
[V1.1] 新增：文件级过滤模式、远程拉取与超时配置
"""
import os
from dotenv import load_dotenv


# --- 脚本基础路径 ---
SCRIPT_BASE_PATH = os.path.abspath(os.path.dirname(__file__))
env_path = os.path.join(SCRIPT_BASE_PATH, ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)
    print(f"✅ 已从脚本目录加载 .env: {env_path}")
else:
    load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


class GlobalConfig:
    """
    代码统计的全局应用配置。
    """

    # --- 路径配置 ---
    SCRIPT_BASE_PATH: str = SCRIPT_BASE_PATH
    DATA_ROOT_DIR_NAME: str = "data"
    TEMPLATES_DIR_NAME: str = "templates"
    PLUGINS_DIR_NAME: str = "plugins"

    # --- Git 命令格式 ---
    # 提交边界行的固定前缀，紧跟作者名 (%an)
    COMMIT_MARKER: str = "COMMIT:"
    GIT_BRANCH_FORMAT = "git rev-parse --abbrev-ref HEAD"
    GIT_FETCH_FORMAT = "git fetch {remote} {branch}"
    GIT_STAT_LOG_FORMAT = (
        'git log {branch} --since="{since} 00:00:00" --until="{until} 23:59:59" '
        "--no-merges -p --unified=0 --no-color --no-ext-diff "
        '--pretty=format:"COMMIT:%an"'
    )

    # --- Git 远程与超时 ---
    GIT_REMOTE: str = os.getenv("CODESTAT_REMOTE", "origin")
    AUTO_FETCH: bool = _env_bool("CODESTAT_AUTO_FETCH", True)
    GIT_COMMAND_TIMEOUT: int = _env_int("CODESTAT_GIT_TIMEOUT", 30)
    GIT_FETCH_TIMEOUT: int = _env_int("CODESTAT_FETCH_TIMEOUT", 120)

    # --- 报告 ---
    OUTPUT_FILENAME_PREFIX = "CodeStatistic"
    OUTPUT_FORMATS = ("table", "markdown", "json", "html")
    DEFAULT_FORMAT: str = os.getenv("CODESTAT_DEFAULT_FORMAT", "table").lower()
    HTML_TEMPLATE_NAME: str = "report.html.j2"

    # --- 智能过滤 (文件级) ---
    # 命中这些模式的文件，其变更行一律不计入统计
    FILTER_FILE_PATTERNS: list[str] = [
        "*.lock",
        "package-lock.json",
        "pnpm-lock.yaml",
        "poetry.lock",
        "pdm.lock",
        "uv.lock",
        "go.sum",
        "dist/*",
        "build/*",
        "*.min.js",
        "*.min.css",
        "*.map",
        "*.pyc",
        "*.so",
        "*.o",
        "__pycache__/*",
        ".idea/*",
        ".vscode/*",
        "*.png",
        "*.jpg",
        "*.jpeg",
        "*.gif",
        "*.svg",
        "*.ico",
        "*.pdf",
        "*.woff",
        "*.woff2",
        "*.eot",
        "*.ttf",
        "*.otf",
        "*.zip",
        "*.tar.gz",
    ]

    def is_valid_format(self, output_format: str) -> bool:
        return output_format in self.OUTPUT_FORMATS

    @property
    def templates_path(self) -> str:
        return os.path.join(self.SCRIPT_BASE_PATH, self.TEMPLATES_DIR_NAME)

    @property
    def data_root_path(self) -> str:
        return os.path.join(self.SCRIPT_BASE_PATH, self.DATA_ROOT_DIR_NAME)
