# app/domain/services/field_extractor.py
"""
Extracción heurística de campos (total y cliente) a partir del texto plano
de una nota.

Las reglas son objetos puros `texto -> valor | None`, evaluadas en orden:
- Total: se juntan TODOS los candidatos y se toma el máximo.
- Cliente: gana la primera regla que encuentre algo.
"""
import math
import re
from typing import List, Optional

_LINE_BREAK = re.compile(r"\r?\n")
_NON_DIGITS = re.compile(r"[^0-9]")
_WHITESPACE = re.compile(r"\s")

_SUBTOTAL = re.compile(r"sub\s*total", re.IGNORECASE)
_TOTAL_WORD = re.compile(r"total", re.IGNORECASE)

_AMOUNT = r"[:\-]?\s*\$?\s*([0-9][0-9.,\s]*)"

_LABELS = [r"CLIENTE", r"NOMBRE", r"RAZ[ÓO]N\s+SOCIAL"]
_RESERVED_NEXT_LINE = re.compile(r"^(RFC|FECHA|FOLIO|TOTAL|SUBTOTAL)$", re.IGNORECASE)

MIN_CLIENTE_LENGTH = 3


def split_lines(text: Optional[str]) -> List[str]:
    """Líneas recortadas y no vacías."""
    if not text:
        return []
    return [line.strip() for line in _LINE_BREAK.split(text) if line.strip()]


def parse_money(raw) -> Optional[float]:
    """
    Convierte un importe libre a número. El separador que aparece más a la
    derecha ('.' o ',') es el decimal; el otro se descarta como separador de
    miles. Nunca lanza excepción: si no hay número devuelve None.

    >>> parse_money("1.234,56"), parse_money("1,234.56"), parse_money("1234")
    (1234.56, 1234.56, 1234.0)
    """
    if raw is None:
        return None
    s = _WHITESPACE.sub("", str(raw))
    if not s:
        return None

    dec_pos = max(s.rfind("."), s.rfind(","))
    if dec_pos == -1:
        normalized = _NON_DIGITS.sub("", s)
    else:
        int_part = _NON_DIGITS.sub("", s[:dec_pos])
        dec_part = _NON_DIGITS.sub("", s[dec_pos + 1:])[:2]
        normalized = f"{int_part}.{dec_part}"

    try:
        value = float(normalized)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


class TotalPattern:
    """Patrón `<etiqueta> [:-] [$] <importe>` para el total de la nota."""

    def __init__(self, name: str, label: str):
        self.name = name
        self.regex = re.compile(label + r"\s*" + _AMOUNT, re.IGNORECASE)

    def first_in(self, line: str) -> Optional[float]:
        match = self.regex.search(line)
        return parse_money(match.group(match.lastindex)) if match else None

    def last_in(self, text: str) -> Optional[float]:
        matches = list(self.regex.finditer(text))
        if not matches:
            return None
        last = matches[-1]
        return parse_money(last.group(last.lastindex))


TOTAL_PATTERNS: List[TotalPattern] = [
    TotalPattern("total_a_pagar", r"(TOTAL\s*A\s*PAGAR)"),
    TotalPattern("importe_total", r"(IMPORTE\s*TOTAL)"),
    TotalPattern("total", r"(^|\b)(TOTAL)"),
]


def extract_total(text: Optional[str]) -> Optional[float]:
    if not text:
        return None

    total_lines = [
        line for line in split_lines(text)
        if _TOTAL_WORD.search(line) and not _SUBTOTAL.search(line)
    ]

    candidates: List[float] = []
    for line in total_lines:
        for pattern in TOTAL_PATTERNS:
            value = pattern.first_in(line)
            if value is not None:
                candidates.append(value)

    # Sin líneas útiles: todo el texto, última ocurrencia de cada patrón
    if not candidates:
        for pattern in TOTAL_PATTERNS:
            value = pattern.last_in(text)
            if value is not None:
                candidates.append(value)

    return max(candidates) if candidates else None


class SameLineLabelRule:
    """`CLIENTE: Juan Pérez` en la misma línea."""

    def __init__(self, labels: List[str]):
        self.regexes = [
            re.compile(r"(" + label + r")\b\s*[:\-]?\s*(.+)$", re.IGNORECASE) for label in labels
        ]

    def __call__(self, text: str) -> Optional[str]:
        for line in split_lines(text):
            for regex in self.regexes:
                match = regex.search(line)
                if match and match.group(2):
                    value = match.group(2).strip()
                    if len(value) >= MIN_CLIENTE_LENGTH:
                        return value
        return None


class NextLineLabelRule:
    """La etiqueta sola en una línea y el nombre en la siguiente."""

    def __init__(self, labels: List[str]):
        self.regexes = [re.compile(r"^" + label + r"$", re.IGNORECASE) for label in labels]

    def __call__(self, text: str) -> Optional[str]:
        lines = split_lines(text)
        for i in range(len(lines) - 1):
            if any(rx.search(lines[i]) for rx in self.regexes):
                value = lines[i + 1].strip()
                if len(value) >= MIN_CLIENTE_LENGTH and not _RESERVED_NEXT_LINE.search(value):
                    return value
        return None


class ClientCodeRule:
    """`12345 - NOMBRE`: número de cliente seguido del nombre."""

    regex = re.compile(r"^([0-9]{4,})\s*[-–—]\s*(.+)$")

    def __call__(self, text: str) -> Optional[str]:
        for line in split_lines(text):
            match = self.regex.search(line)
            if match and match.group(2).strip():
                return f"{match.group(1)} - {match.group(2).strip()}"
        return None


CLIENTE_RULES = [
    SameLineLabelRule(_LABELS),
    NextLineLabelRule(_LABELS),
    ClientCodeRule(),
]


def extract_cliente(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    for rule in CLIENTE_RULES:
        value = rule(text)
        if value:
            return value
    return None
