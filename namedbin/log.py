"""NamedBin日志记录器.

库本身不添加任何 Handler, 由应用程序决定日志输出方式.
"""

import logging

logger = logging.getLogger("namedbin")

# 十六进制转储每行的字节数
HEXDUMP_ROW_SIZE = 16


def get_hexdump(
    data: bytes | bytearray | memoryview, pos: int, window: int = 16
) -> str:
    """渲染 pos 前后 window 字节的十六进制上下文.

    每行以绝对偏移开头, pos 处的字节用方括号标出,
    便于与 `DecodeError.offset` 对照.

    Args:
        data: 完整的输入数据.
        pos: 出错位置.
        window: 向前/向后显示的字节数.

    Returns:
        str: 多行文本, 首行为位置摘要.
    """
    start = max(0, pos - window)
    end = min(len(data), pos + window)
    chunk = bytes(data[start:end])

    lines = [f"位置 {pos} 的上下文 (显示 {start}-{end}, 共 {len(data)} 字节):"]
    for row in range(0, len(chunk), HEXDUMP_ROW_SIZE):
        row_start = start + row
        cells = [
            f"[{byte:02x}]" if offset == pos else f"{byte:02x}"
            for offset, byte in enumerate(
                chunk[row : row + HEXDUMP_ROW_SIZE], row_start
            )
        ]
        lines.append(f"{row_start:08x}  {' '.join(cells)}")
    return "\n".join(lines)
