"""
XML 报文编解码：参数字典 ↔ <xml><key><![CDATA[value]]></key>...</xml>。

解码按 SAX 事件流处理：开始标签记录字段名，字符数据累加后去除首尾空白，
匹配的结束标签写入非空值（同名字段后写覆盖先写）。
"""

import io
import logging
import re
import xml.sax
from collections.abc import Mapping
from xml.sax.handler import ContentHandler, feature_external_ges, feature_external_pes

from wxpay.errors import DecodeError

logger = logging.getLogger(__name__)

ROOT_TAG = "xml"

# 字段名只允许 ASCII 元素名，不含命名空间前缀
_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_.\-]*")
# XML 1.0 无法承载的字符
_INVALID_CHAR_RE = re.compile(
    r"[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)


def _cdata(value: str) -> str:
    # "]]>" 拆成相邻的两个 CDATA 段；"\r" 改用字符引用，避免解析时被换行规范化
    value = value.replace("]]>", "]]]]><![CDATA[>")
    value = value.replace("\r", "]]>&#13;<![CDATA[")
    return "<![CDATA[" + value + "]]>"


def map_to_xml(params: Mapping[str, str]) -> bytes:
    """
    将参数字典编码为 XML 报文，字段按名称排序输出。

    Raises:
        ValueError: 字段名不是合法的元素名，或字段值含有 XML 无法承载的字符。
    """
    parts = [f"<{ROOT_TAG}>"]
    for k in sorted(params):
        if not _NAME_RE.fullmatch(k):
            raise ValueError(f"字段名不是合法的 XML 元素名: {k!r}")
        v = params[k]
        bad = _INVALID_CHAR_RE.search(v)
        if bad:
            raise ValueError(f"字段 {k} 含有 XML 无法承载的字符: {bad.group()!r}")
        parts.append(f"<{k}>{_cdata(v)}</{k}>")
    parts.append(f"</{ROOT_TAG}>")
    return "".join(parts).encode("utf-8")


def _local_name(name: str) -> str:
    return name.rsplit(":", 1)[-1]


class _FlatXMLHandler(ContentHandler):
    """把扁平 XML 的叶子节点收集为 dict。"""

    def __init__(self):
        super().__init__()
        self.params: dict[str, str] = {}
        self._key: str | None = None
        self._chunks: list[str] = []

    def startElement(self, name, attrs):
        self._key = _local_name(name)
        self._chunks = []

    def characters(self, content):
        self._chunks.append(content)

    def endElement(self, name):
        value = "".join(self._chunks).strip()
        if _local_name(name) == self._key and value:
            self.params[self._key] = value
        self._chunks = []


def xml_to_map(body: bytes | str) -> dict[str, str]:
    """
    将 XML 报文解码为参数字典。

    空文档返回空 dict；格式错误抛出 DecodeError。
    不解析外部实体。
    """
    if isinstance(body, str):
        body = body.encode("utf-8")
    if not body.strip():
        return {}

    handler = _FlatXMLHandler()
    parser = xml.sax.make_parser()
    parser.setFeature(feature_external_ges, False)
    parser.setFeature(feature_external_pes, False)
    parser.setContentHandler(handler)
    try:
        parser.parse(io.BytesIO(body))
    except xml.sax.SAXParseException as e:
        logger.debug("XML 解析失败: %s", e)
        raise DecodeError(f"XML 格式错误: {e}") from e
    return handler.params
