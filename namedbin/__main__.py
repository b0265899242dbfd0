"""NamedBin命令行工具."""

import json
import sys
import traceback
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from . import loads
from .frame import Frame
from .types import LEAF_TYPES

# 流式读取配置
FILE_SIZE_THRESHOLD = 10 * 1024 * 1024  # 10MB
CHUNK_SIZE = 8 * 1024 * 1024  # 8MB


def _read_binary_file(file_path: Path, verbose: bool) -> bytes:
    """读取二进制文件,大文件使用分块以控制内存.

    Args:
        file_path: 文件路径.
        verbose: 是否显示详细信息.

    Returns:
        文件内容的bytes.
    """
    file_size = file_path.stat().st_size

    if file_size > FILE_SIZE_THRESHOLD:
        if verbose:
            click.echo(f"[DEBUG] 文件大小 {file_size} 字节,使用分块读取", err=True)

        chunks = []
        with open(file_path, "rb") as f:
            while chunk := f.read(CHUNK_SIZE):
                chunks.append(chunk)
        return b"".join(chunks)
    return file_path.read_bytes()


def _read_hex_file(file_path: Path) -> bytes:
    """读取并解析十六进制文本文件.

    Raises:
        ValueError: 如果文件内容不是有效的十六进制字符串.
        UnicodeDecodeError: 如果文件不是文本.
    """
    hex_data = file_path.read_text(encoding="utf-8")

    # 验证并清理
    cleaned = "".join(hex_data.split())
    if not all(c in "0123456789abcdefABCDEF" for c in cleaned):
        raise ValueError("不是有效的十六进制字符串")

    return bytes.fromhex(cleaned)


def _frame_record(index: int, frame: Frame, leaf: str | None) -> dict[str, Any]:
    """把帧转换为便于输出的字典."""
    body = bytes(frame.body)
    record: dict[str, Any] = {
        "index": index,
        "offset": frame.offset,
        "name": frame.name,
        "total_size": frame.total_size,
        "body_size": frame.body_size,
        "body": body.hex(),
    }
    if leaf is not None:
        leaf_type = LEAF_TYPES[leaf]
        # 长度不匹配的帧体无法按该类型解释
        record["value"] = (
            leaf_type.unpack(body) if len(body) == leaf_type.size() else None
        )
    return record


def _build_table(records: list[dict[str, Any]], leaf: str | None) -> Table:
    """构建帧列表的 Rich 表格."""
    table = Table(title=f"{len(records)} frame(s)")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Offset", justify="right")
    table.add_column("Name", style="bold blue")
    table.add_column("Total", justify="right", style="cyan")
    table.add_column("Body", justify="right", style="cyan")
    table.add_column("Data", style="green")
    if leaf is not None:
        table.add_column(leaf, style="magenta")

    for rec in records:
        row = [
            str(rec["index"]),
            str(rec["offset"]),
            rec["name"] or "-",
            str(rec["total_size"]),
            str(rec["body_size"]),
            bytes.fromhex(rec["body"]).hex(" ").upper(),
        ]
        if leaf is not None:
            row.append("-" if rec["value"] is None else str(rec["value"]))
        table.add_row(*row)
    return table


def _build_tree(records: list[dict[str, Any]]) -> Tree:
    """构建帧列表的 Rich 树."""
    root = Tree("NamedBin Stream", style="bold white")
    for rec in records:
        label = Text()
        label.append(f"[{rec['index']}] ", style="dim")
        label.append(rec["name"] or "<unnamed>", style="bold blue")
        label.append(f" (total={rec['total_size']})", style="cyan")

        branch = root.add(label)
        branch.add(Text(f"offset: {rec['offset']}", style="dim"))
        body = Text(f"body={rec['body_size']}: ", style="cyan")
        body.append(bytes.fromhex(rec["body"]).hex(" ").upper(), style="green")
        branch.add(body)
        if "value" in rec and rec["value"] is not None:
            branch.add(Text(f"value: {rec['value']}", style="magenta"))
    return root


def _decode_and_print(
    data: bytes,
    output_format: str,
    output_file: str | None,
    verbose: bool,
    leaf: str | None,
) -> None:
    """解码并输出结果."""
    if verbose:
        click.echo(f"[DEBUG] 数据大小: {len(data)} 字节", err=True)

    try:
        frames = loads(data)
        records = [_frame_record(i, f, leaf) for i, f in enumerate(frames)]
    except Exception as e:
        if verbose:
            traceback.print_exc(file=sys.stderr)
        raise click.ClickException(f"解码失败: {e}") from e

    if verbose:
        click.echo(f"[DEBUG] 解析出 {len(records)} 个帧", err=True)

    if output_format == "json":
        output_text = json.dumps(records, indent=2, ensure_ascii=False)
        if output_file:
            Path(output_file).write_text(output_text, encoding="utf-8")
            click.echo(f"结果已保存到: {output_file}", err=True)
        else:
            Console().print(
                Syntax(output_text, "json", theme="monokai", word_wrap=True)
            )
        return

    renderable = (
        _build_tree(records) if output_format == "tree" else _build_table(records, leaf)
    )
    if output_file:
        with open(output_file, "w", encoding="utf-8") as f:
            Console(file=f, width=120).print(renderable)
        click.echo(f"结果已保存到: {output_file}", err=True)
    else:
        Console().print(renderable)


@click.command(help="NamedBin 帧流查看工具")
@click.argument("encoded", required=False)
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="从文件读取数据 (十六进制文本或原始二进制)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["pretty", "json", "tree"]),
    default="pretty",
    show_default=True,
    help="输出格式",
)
@click.option(
    "--as",
    "leaf",
    type=click.Choice(sorted(LEAF_TYPES)),
    default=None,
    help="按指定数值类型解释帧体 (本机字节序)",
)
@click.option(
    "-o",
    "--output",
    "output_file",
    type=click.Path(dir_okay=False, writable=True),
    help="将输出保存到文件 (如不指定则输出到控制台)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="显示详细的解码过程信息",
)
def cli(
    encoded: str | None,
    file_path: Path | None,
    output_format: str,
    leaf: str | None,
    output_file: str | None,
    verbose: bool,
) -> None:
    """NamedBin 帧流查看工具.

    Examples:
      # 直接解码十六进制数据
      namedbin "0d00...2a000000"

      # 从文件读取数据
      namedbin -f stream.bin

      # 以 JSON 格式输出, 并把帧体解释为 int32
      namedbin -f stream.bin --format json --as int32
    """
    # 互斥参数检查
    if encoded and file_path:
        raise click.UsageError("不能同时指定 ENCODED 数据和 --file 参数")
    if not encoded and not file_path:
        raise click.UsageError("必须指定 ENCODED 数据或 --file 参数")

    if file_path:
        try:
            # 尝试hex文本模式
            data = _read_hex_file(file_path)
            if verbose:
                click.echo("[DEBUG] 从文件读取十六进制数据 (文本模式)", err=True)
        except (UnicodeDecodeError, ValueError):
            # 降级到二进制模式
            data = _read_binary_file(file_path, verbose)
            if verbose:
                click.echo("[DEBUG] 从文件读取二进制数据 (二进制模式)", err=True)
    else:
        assert encoded is not None
        try:
            data = bytes.fromhex(encoded)
        except ValueError as e:
            raise click.BadParameter(f"无效的十六进制格式 - {e}") from e

    _decode_and_print(data, output_format, output_file, verbose, leaf)


def main() -> None:
    """入口函数."""
    cli()


if __name__ == "__main__":
    main()
