# git_utils.py
import logging
import shlex
import subprocess
import tempfile
from datetime import date
from typing import Iterator, Optional

from config import GlobalConfig

logger = logging.getLogger(__name__)


class GitCommandError(Exception):
    """git 命令无法启动或以非零状态退出"""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


def run_git_command(
    cmd: str, repo_path: str, context: str = "执行Git命令", timeout: int = 30
) -> Optional[str]:
    """
    统一的Git命令执行函数 (一次性读取全部输出)
    - 使用 cwd 参数在指定仓库路径下执行
    - 失败时记录日志并返回 None
    """
    try:
        logger.info(f"在 {repo_path} 中执行命令: {cmd}")
        result = subprocess.run(
            cmd,
            shell=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            cwd=repo_path,
        )
        if result.returncode != 0:
            logger.error(f"{context}失败: {result.stderr.strip()}")
            return None
        logger.info(f"{context}成功，输出 {len(result.stdout.splitlines())} 行")
        return result.stdout
    except subprocess.TimeoutExpired:
        logger.error(f"{context}超时 ({timeout}s)")
        return None
    except OSError as e:
        logger.error(f"{context}出错: {e}")
        return None


def is_git_repository(repo_path: str) -> bool:
    """检查指定路径是否为Git仓库"""
    try:
        result = subprocess.run(
            "git rev-parse --is-inside-work-tree",
            shell=True,
            capture_output=True,
            text=True,
            cwd=repo_path,
        )
        return result.returncode == 0
    except OSError:
        return False


def get_current_branch(repo_path: str, global_config: GlobalConfig) -> Optional[str]:
    """获取当前 Git 分支名，失败返回 None"""
    output = run_git_command(
        global_config.GIT_BRANCH_FORMAT,
        repo_path,
        "获取当前分支",
        timeout=global_config.GIT_COMMAND_TIMEOUT,
    )
    if not output or not output.strip():
        return None
    return output.strip().splitlines()[0]


def fetch_latest_commits(
    repo_path: str, branch: str, global_config: GlobalConfig
) -> bool:
    """
    从远程仓库拉取最新的提交记录。
    拉取失败不是致命错误，调用方会继续使用本地已有数据进行统计。
    """
    cmd = global_config.GIT_FETCH_FORMAT.format(
        remote=shlex.quote(global_config.GIT_REMOTE), branch=shlex.quote(branch)
    )
    output = run_git_command(
        cmd,
        repo_path,
        f"拉取最新提交记录 (分支: {branch})",
        timeout=global_config.GIT_FETCH_TIMEOUT,
    )
    return output is not None


def build_stat_log_command(
    branch: str, since: date, until: date, global_config: GlobalConfig
) -> str:
    """构建统计用的 git log 命令 (排除合并提交，输出逐行 diff)"""
    return global_config.GIT_STAT_LOG_FORMAT.format(
        branch=shlex.quote(branch),
        since=since.strftime("%Y-%m-%d"),
        until=until.strftime("%Y-%m-%d"),
    )


def stream_git_lines(
    cmd: str, repo_path: str, context: str = "执行Git命令"
) -> Iterator[str]:
    """
    流式执行 git 命令，逐行产出标准输出 (不含换行符)。
    - stderr 写入临时文件，git 输出大量警告时也不会阻塞管道
    - 调用方提前关闭生成器 (取消) 时，会终止 git 进程
    - git 以非零状态退出时抛出 GitCommandError
    """
    logger.info(f"在 {repo_path} 中执行命令: {cmd}")
    with tempfile.TemporaryFile() as stderr_file:
        try:
            process = subprocess.Popen(
                cmd,
                shell=True,
                stdout=subprocess.PIPE,
                stderr=stderr_file,
                text=True,
                encoding="utf-8",
                errors="replace",
                cwd=repo_path,
            )
        except OSError as e:
            raise GitCommandError(f"{context}失败: 无法启动 git ({e})") from e

        try:
            for line in process.stdout:
                yield line.rstrip("\r\n")
            returncode = process.wait()
        finally:
            if process.poll() is None:
                logger.warning(f"⚠️ {context}被中断，正在终止 git 进程")
                process.kill()
                process.wait()
            process.stdout.close()

        if returncode != 0:
            stderr_file.seek(0)
            stderr_output = stderr_file.read().decode("utf-8", errors="replace")
            raise GitCommandError(
                f"{context}失败 (退出码 {returncode}): {stderr_output.strip()}",
                returncode=returncode,
            )
    logger.info(f"{context}完成")
