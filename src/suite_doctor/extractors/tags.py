"""Keyword-based tag inference for test cases."""

from suite_doctor.models.feature_models import ComplexityBreakdown

# (tag, keywords); keywords are matched case-insensitively against the
# case name and its body.
DOMAIN_TAGS: list[tuple[str, tuple[str, ...]]] = [
    ("authentication", ("login", "登录")),
    ("registration", ("register", "注册")),
    ("pet-management", ("pet", "宠物")),
    ("analysis", ("analysis", "分析")),
    ("file-upload", ("upload", "上传")),
    ("community", ("community", "社区")),
]

TYPE_TAGS: list[tuple[str, tuple[str, ...]]] = [
    ("error-handling", ("error", "错误")),
    ("performance", ("performance", "性能")),
    ("visual", ("screenshot", "视觉")),
]


def _matches(haystack: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in haystack for keyword in keywords)


def infer_features(text: str) -> list[str]:
    """Return the domain tags whose keywords occur in ``text``."""
    haystack = text.lower()
    return [tag for tag, keywords in DOMAIN_TAGS if _matches(haystack, keywords)]


def infer_tags(name: str, block_content: str, complexity: ComplexityBreakdown) -> list[str]:
    """Return domain tags, the complexity tag, then type tags, in that order."""
    haystack = f"{name}\n{block_content}".lower()
    tags = infer_features(haystack)
    tags.append(f"complexity-{complexity.level.value}")
    tags.extend(tag for tag, keywords in TYPE_TAGS if _matches(haystack, keywords))
    return tags
