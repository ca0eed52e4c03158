"""Structural comparison of function signatures.

Signatures look like ``(a: string, b?: Map<K, V>): ReturnType``. Parameters
are split on top-level commas only, so generics and inline object types are
kept intact.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from primpact.breaking.exports import normalize_signature

_OPENERS = "<([{"
_CLOSERS = ">)]}"


@dataclass
class SignatureDiff:
    """Outcome of comparing two signatures."""

    changed: bool
    details: list[str] = field(default_factory=list)

    @property
    def description(self) -> str:
        return "; ".join(self.details)


@dataclass
class ParsedSignature:
    params: list[str]
    return_type: str | None


def _is_closer(text: str, i: int) -> bool:
    # the ">" of an arrow "=>" closes nothing
    return text[i] in _CLOSERS and not (text[i] == ">" and i > 0 and text[i - 1] == "=")


def split_parameters(param_str: str) -> list[str]:
    """Split a parameter list on commas that are not nested in brackets."""
    params = []
    depth = 0
    current = []
    for i, ch in enumerate(param_str):
        if ch in _OPENERS:
            depth += 1
        elif _is_closer(param_str, i):
            depth -= 1
        elif ch == "," and depth == 0:
            param = "".join(current).strip()
            if param:
                params.append(param)
            current = []
            continue
        current.append(ch)

    param = "".join(current).strip()
    if param:
        params.append(param)
    return params


def parse_signature(sig: str) -> ParsedSignature:
    """Parse ``(params): returnType`` into its parts."""
    text = normalize_signature(sig)
    if not text.startswith("("):
        return ParsedSignature(params=[], return_type=None)

    depth = 0
    close_index = -1
    for i, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                close_index = i
                break

    if close_index == -1:
        # Unbalanced: treat everything after "(" as parameters
        return ParsedSignature(params=split_parameters(text[1:]), return_type=None)

    params = split_parameters(text[1:close_index])
    rest = text[close_index + 1:].strip()
    return_type = normalize_signature(rest[1:]) if rest.startswith(":") else None
    return ParsedSignature(params=params, return_type=return_type)


def extract_param_type(param: str) -> str:
    """Type portion of a parameter: ``...name?: T`` -> ``T``.

    A parameter without a top-level colon is returned as-is.
    """
    cleaned = param.strip()
    if cleaned.startswith("..."):
        cleaned = cleaned[3:].strip()

    depth = 0
    for i, ch in enumerate(cleaned):
        if ch in _OPENERS:
            depth += 1
        elif _is_closer(cleaned, i):
            depth -= 1
        elif ch == ":" and depth == 0:
            return normalize_signature(cleaned[i + 1:])
    return normalize_signature(cleaned)


def _param_name(param: str) -> str:
    return param.split(":", 1)[0].replace("?", "").replace(".", "").strip()


def diff_signatures(base_sig: str | None, head_sig: str | None) -> SignatureDiff:
    """Compare two signatures and describe what changed."""
    if base_sig is None and head_sig is None:
        return SignatureDiff(changed=False, details=["no signatures to compare"])
    if base_sig is None:
        return SignatureDiff(changed=True, details=["signature added"])
    if head_sig is None:
        return SignatureDiff(changed=True, details=["signature removed"])

    if normalize_signature(base_sig) == normalize_signature(head_sig):
        return SignatureDiff(changed=False, details=["signatures are identical"])

    base = parse_signature(base_sig)
    head = parse_signature(head_sig)
    differences = []

    if len(base.params) != len(head.params):
        differences.append(
            f"parameter count changed from {len(base.params)} to {len(head.params)}"
        )

    for base_param, head_param in zip(base.params, head.params):
        base_type = extract_param_type(base_param)
        head_type = extract_param_type(head_param)
        if base_type != head_type:
            differences.append(
                f"parameter '{_param_name(base_param)}' type changed "
                f"from '{base_type}' to '{head_type}'"
            )

    if base.return_type != head.return_type:
        if base.return_type is None:
            differences.append(f"return type added: '{head.return_type}'")
        elif head.return_type is None:
            differences.append(f"return type removed (was '{base.return_type}')")
        else:
            differences.append(
                f"return type changed from '{base.return_type}' to '{head.return_type}'"
            )

    if not differences:
        return SignatureDiff(changed=True, details=["signature changed"])
    return SignatureDiff(changed=True, details=differences)
