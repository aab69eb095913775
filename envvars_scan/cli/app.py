"""
CLI 入口模块 - 使用 Typer 构建命令行界面

扫描流程：
1. 加载仓库（本地目录、远程克隆或 git ref 基线）
2. 运行各格式扫描器与 semgrep
3. 合并去重
4. 生成报告
"""

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from envvars_scan.config import ConfigError, init_config
from envvars_scan.core.compare import compare_results, load_scan_result
from envvars_scan.repo import (
    CloneConfig,
    RepoError,
    base_worktree,
    clone_repository,
    parse_repo_spec,
    remove_clone,
)
from envvars_scan.reporters import JsonReporter, RichReporter
from envvars_scan.scan import ScanOptions, scan_path
from envvars_scan.semgrep import SemgrepError

# 创建 Typer 应用实例
app = typer.Typer(
    name="envvars-scan",
    help="Scan codebases for environment variable usage and resolved values.",
    add_completion=False,
)

# Rich Console 用于输出；错误与日志走 stderr，保证 --json 输出干净
console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


@app.command()
def scan(
    path: str = typer.Argument(".", help="Path to scan"),
    all_vars: bool = typer.Option(False, "--all", help="Include all env vars (not just uppercase)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show parser warnings"),
    semgrep: bool = typer.Option(True, "--semgrep/--no-semgrep", help="Run the semgrep code scan"),
    properties: bool = typer.Option(True, "--properties/--no-properties", help="Scan property files"),
    dotenv: bool = typer.Option(True, "--dotenv/--no-dotenv", help="Scan .env files"),
    docker: bool = typer.Option(True, "--docker/--no-docker", help="Scan Dockerfiles"),
    compose: bool = typer.Option(False, "--compose", help="Include docker-compose env vars"),
    k8s: bool = typer.Option(False, "--k8s", help="Include Kubernetes manifests (Deployments, ConfigMaps, Secrets)"),
    show_values: bool = typer.Option(False, "--show-values", help="Show env var values (sensitive values are masked)"),
    repo: Optional[str] = typer.Option(None, "--repo", "-r", help="Clone and scan a remote GitHub repo (org/repo or URL)"),
    keep: bool = typer.Option(False, "--keep", help="Keep cloned repo after scanning"),
    branch: Optional[str] = typer.Option(None, "--branch", help="Branch to clone"),
    diff: Optional[str] = typer.Option(None, "--diff", "-d", help="Compare current state against a git ref"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to an envvars-scan.yaml config file"),
) -> None:
    """
    Scan a project for environment variables.

    Examples:
        envvars-scan scan
        envvars-scan scan ./service --k8s --compose --show-values
        envvars-scan scan --repo org/repo --json
        envvars-scan scan --diff main
    """
    _setup_logging(verbose)

    options = ScanOptions(
        filter_uppercase=not all_vars,
        custom_rules_path=config,
        semgrep=semgrep,
        properties=properties,
        dotenv=dotenv,
        docker=docker,
        compose=compose,
        k8s=k8s,
    )

    if diff:
        _run_diff(Path(path), diff, options, json_output)
        return

    target = Path(path)
    cloned: Optional[Path] = None

    if repo:
        try:
            spec = parse_repo_spec(repo)
        except ValueError as e:
            _fail(str(e))
        if not json_output:
            console.print(f"[blue]Cloning {spec.url}...[/blue]")
        try:
            cloned = clone_repository(spec, CloneConfig(branch=branch))
        except RepoError as e:
            _fail(str(e))
        target = cloned

    if not json_output:
        console.print(f"[blue]Scanning {target.resolve()} for environment variables...[/blue]")

    try:
        result = scan_path(target, options)
    except (FileNotFoundError, ConfigError, SemgrepError) as e:
        if cloned and not keep:
            remove_clone(cloned)
        _fail(str(e))

    try:
        if json_output:
            JsonReporter().report_scan(
                result,
                cloned_from=repo if cloned else None,
                cloned_path=str(cloned) if cloned and keep else None,
            )
            return

        reporter = RichReporter(console)
        if verbose:
            for error in result.errors:
                reporter.warn(error)
        reporter.report_scan(result, show_values=show_values)
    finally:
        if cloned and not keep:
            if not json_output:
                console.print(f"[dim]Cleaning up {cloned}...[/dim]")
            remove_clone(cloned)
        elif cloned and not json_output:
            console.print(f"[dim]Repo kept at: {cloned}[/dim]")


def _run_diff(path: Path, ref: str, options: ScanOptions, json_output: bool) -> None:
    """对比工作目录（含未提交修改）与 git ref"""
    abs_path = path.resolve()

    try:
        if not json_output:
            console.print("[blue]Scanning current state...[/blue]")
        head = scan_path(abs_path, options)

        if not json_output:
            console.print(f"[blue]Scanning base state ({ref})...[/blue]")
        with base_worktree(abs_path, ref) as worktree:
            base = scan_path(worktree, options)
    except (FileNotFoundError, ConfigError, SemgrepError, RepoError) as e:
        _fail(str(e))

    comparison = compare_results(base, head)
    if json_output:
        JsonReporter().report_comparison(comparison, base, head)
    else:
        RichReporter(console).report_comparison(
            comparison, base, head, title=f"Env Var Changes ({ref} → current)"
        )


@app.command()
def compare(
    base: Path = typer.Argument(..., help="Base JSON scan output"),
    head: Path = typer.Argument(..., help="Head JSON scan output"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """
    Compare two JSON scan outputs.

    Exits with code 1 when variables were added or removed.
    """
    try:
        base_result = load_scan_result(base)
        head_result = load_scan_result(head)
    except ValueError as e:
        _fail(str(e))

    comparison = compare_results(base_result, head_result)
    if json_output:
        JsonReporter().report_comparison(comparison, base_result, head_result)
    else:
        RichReporter(console).report_comparison(comparison, base_result, head_result)

    if comparison.has_changes:
        raise typer.Exit(1)


@app.command("init-config")
def init_config_command(
    path: str = typer.Argument(".", help="Project root"),
) -> None:
    """Create an example config file at .skyhook/envvars-scan.yaml."""
    config_path, created = init_config(Path(path).resolve())
    if not created:
        console.print(f"[yellow]Config file already exists: {config_path}[/yellow]")
        return
    console.print(f"[green]Created config file: {config_path}[/green]")
    console.print("[blue]Edit the file to add custom patterns for your codebase[/blue]")


@app.command()
def version() -> None:
    """Show the version of envvars-scan."""
    from envvars_scan import __version__
    console.print(f"[bold]envvars-scan[/bold] v{__version__}")


if __name__ == "__main__":
    app()
