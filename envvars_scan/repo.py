"""
仓库处理器模块 - 远程仓库克隆与基线 worktree

支持：
1. GitHub 仓库（org/repo 或完整 URL）浅克隆到缓存目录
2. 超时和重试机制
3. 对比模式下为指定 git ref 创建临时 worktree，退出时总会清理
"""

import logging
import re
import shutil
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

logger = logging.getLogger(__name__)


# ============================================================
# 配置常量
# ============================================================

REPO_CACHE_DIR = Path(tempfile.gettempdir()) / "envvars-scan-repos"

# https://github.com/org/repo(.git) 或 git@github.com:org/repo
GITHUB_URL_PATTERN = re.compile(r'github\.com[:/]([^/]+)/([^/]+?)(?:\.git)?/?$')
# org/repo
SHORT_SPEC_PATTERN = re.compile(r'^([^/\s]+)/([^/\s]+)$')


# ============================================================
# 数据模型
# ============================================================

@dataclass
class CloneConfig:
    """
    克隆配置

    Attributes:
        branch: 要克隆的分支（None 为默认分支）
        cache_dir: 克隆缓存目录
        timeout: 低速超时时间（秒）
        max_retries: 最大重试次数
        retry_delay: 初始重试延迟（秒）
        backoff_factor: 指数退避因子
    """
    branch: Optional[str] = None
    cache_dir: Path = REPO_CACHE_DIR
    timeout: int = 120
    max_retries: int = 2
    retry_delay: float = 2.0
    backoff_factor: float = 2.0


@dataclass
class RepoSpec:
    """GitHub 仓库标识"""
    org: str
    repo: str
    url: str


class RepoError(Exception):
    """仓库操作错误基类"""
    pass


class CloneError(RepoError):
    """克隆错误"""
    pass


class WorktreeError(RepoError):
    """worktree 创建错误"""
    pass


# ============================================================
# 克隆
# ============================================================

def parse_repo_spec(target: str) -> RepoSpec:
    """
    解析 org/repo 或 GitHub URL

    Raises:
        ValueError: 格式无效
    """
    target = target.strip()
    match = GITHUB_URL_PATTERN.search(target) or SHORT_SPEC_PATTERN.match(target)
    if not match:
        raise ValueError(f"Invalid repo format: {target}. Use org/repo or full GitHub URL")
    org, repo = match.group(1), match.group(2)
    if repo.endswith(".git"):
        repo = repo[:-4]
    return RepoSpec(org=org, repo=repo, url=f"https://github.com/{org}/{repo}.git")


def clone_repository(spec: RepoSpec, config: Optional[CloneConfig] = None) -> Path:
    """
    浅克隆仓库到缓存目录，已存在时直接复用

    Returns:
        克隆后的本地路径

    Raises:
        CloneError: 所有重试都失败
    """
    if config is None:
        config = CloneConfig()

    repo_dir = Path(config.cache_dir) / spec.org / spec.repo
    if repo_dir.exists():
        logger.info(f"Using cached repo: {repo_dir}")
        return repo_dir
    repo_dir.parent.mkdir(parents=True, exist_ok=True)

    kwargs = {"depth": 1}
    if config.branch:
        kwargs["branch"] = config.branch

    last_error: Optional[Exception] = None
    delay = config.retry_delay

    for attempt in range(config.max_retries + 1):
        try:
            Repo.clone_from(
                spec.url,
                repo_dir,
                env={
                    "GIT_HTTP_LOW_SPEED_LIMIT": "1000",
                    "GIT_HTTP_LOW_SPEED_TIME": str(config.timeout),
                    "GIT_TERMINAL_PROMPT": "0",
                },
                **kwargs,
            )
            return repo_dir
        except GitCommandError as e:
            shutil.rmtree(repo_dir, ignore_errors=True)
            last_error = e
            error_str = str(e).lower()
            # 认证错误和分支不存在不重试
            if "authentication" in error_str or "403" in error_str or "not found" in error_str:
                break
            if attempt < config.max_retries:
                logger.warning(f"Clone attempt {attempt + 1} failed, retrying in {delay:.0f}s")
                time.sleep(delay)
                delay *= config.backoff_factor

    raise CloneError(f"Failed to clone {spec.url}: {last_error}")


def remove_clone(path: Path) -> None:
    shutil.rmtree(path, ignore_errors=True)


# ============================================================
# 基线 worktree
# ============================================================

def _open_repo(repo_path: Path) -> Repo:
    try:
        return Repo(repo_path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise WorktreeError(f"Not a git repository: {repo_path}") from e


@contextmanager
def base_worktree(repo_path: Path, ref: str) -> Iterator[Path]:
    """
    在临时目录中以 detached HEAD 检出 ref，退出时删除

    工作目录本身不会被修改。

    Raises:
        WorktreeError: 不是 git 仓库、ref 不存在或 worktree 创建失败
    """
    repo = _open_repo(repo_path)
    try:
        repo.git.rev_parse("--verify", ref)
    except GitCommandError as e:
        raise WorktreeError(f"Git ref not found: {ref}") from e

    parent = Path(tempfile.mkdtemp(prefix="envvars-scan-"))
    worktree_path = parent / "worktree"
    try:
        try:
            repo.git.worktree("add", "--detach", str(worktree_path), ref)
        except GitCommandError as e:
            raise WorktreeError(f"Failed to create worktree for {ref}: {e}") from e
        yield worktree_path
    finally:
        try:
            repo.git.worktree("remove", "--force", str(worktree_path))
        except GitCommandError:
            logger.debug(f"git worktree remove failed for {worktree_path}, pruning")
            shutil.rmtree(worktree_path, ignore_errors=True)
            try:
                repo.git.worktree("prune")
            except GitCommandError as e:
                logger.warning(f"git worktree prune failed: {e}")
        shutil.rmtree(parent, ignore_errors=True)
