# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 名称筛选

两种互斥的筛选方式：
- 正则模式：多个表达式按"或"组合，忽略大小写，部分匹配即可
- 精确模式：转义所有元字符并锚定整个字符串，区分大小写
"""

import re
import fnmatch
from typing import Iterable, Optional, Pattern


class NameFilter:
    """对象名称筛选器"""

    def __init__(self, regex: Pattern, exact: bool = False):
        self.regex = regex
        self.exact = exact

    @classmethod
    def from_patterns(cls, patterns: Iterable[str]) -> "NameFilter":
        parts = [p for p in patterns if p]
        if not parts:
            return cls.match_all()
        combined = "|".join(f"(?:{p})" for p in parts)
        return cls(re.compile(combined, re.IGNORECASE))

    @classmethod
    def from_literals(cls, names: Iterable[str]) -> "NameFilter":
        escaped = "|".join(re.escape(n) for n in names)
        return cls(re.compile(f"^(?:{escaped})$"), exact=True)

    @classmethod
    def from_wildcard(cls, wildcard: str) -> "NameFilter":
        """shell 风格通配符，如 10.0.*"""
        return cls(re.compile(fnmatch.translate(wildcard), re.IGNORECASE), exact=True)

    @classmethod
    def match_all(cls) -> "NameFilter":
        return cls(re.compile(".*"))

    @property
    def pattern(self) -> str:
        return self.regex.pattern

    def matches(self, name: Optional[str]) -> bool:
        if name is None:
            return False
        if self.exact:
            return self.regex.fullmatch(name) is not None
        return self.regex.search(name) is not None

    __call__ = matches

    def __repr__(self) -> str:
        mode = "exact" if self.exact else "regex"
        return f"NameFilter({mode}, {self.pattern!r})"


def build_name_filter(
    patterns: Optional[Iterable[str]] = None,
    literal_names: Optional[Iterable[str]] = None,
) -> NameFilter:
    """
    根据正则或精确名称构造筛选器

    调用方应先用 validate_name_selection 保证两者互斥；
    都未提供时匹配所有名称。
    """
    if literal_names:
        return NameFilter.from_literals(literal_names)
    if patterns:
        return NameFilter.from_patterns(patterns)
    return NameFilter.match_all()
