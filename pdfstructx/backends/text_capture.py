"""Positioned text capture from page content streams.

The content stream is interpreted one operator at a time, tracking the
current transformation matrix, the text and line matrices and the text
state, so every text-showing operator is captured at its own origin.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from pypdf import PageObject, PdfReader
from pypdf.generic import ContentStream, DictionaryObject, NameObject, StreamObject

LOGGER = logging.getLogger(__name__)

Matrix = tuple[float, float, float, float, float, float]

IDENTITY_MATRIX: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

DEFAULT_FONT_SIZE = 10.0
# Glyph widths are approximated relative to the font size.
CHAR_WIDTH_FACTOR = 0.5
DEFAULT_LEADING_FACTOR = 1.2
MAX_FORM_DEPTH = 8
MAX_CMAP_RANGE = 0x10000

_BFCHAR_RE = re.compile(rb"beginbfchar(.*?)endbfchar", re.DOTALL)
_BFRANGE_RE = re.compile(rb"beginbfrange(.*?)endbfrange", re.DOTALL)
_HEX_PAIR_RE = re.compile(rb"<([0-9A-Fa-f\s]*)>\s*<([0-9A-Fa-f\s]*)>")
_RANGE_ENTRY_RE = re.compile(
    rb"<([0-9A-Fa-f\s]*)>\s*<([0-9A-Fa-f\s]*)>\s*(<[0-9A-Fa-f\s]*>|\[[^\]]*\])"
)
_HEX_RE = re.compile(rb"<([0-9A-Fa-f\s]*)>")


@dataclass(slots=True)
class CapturedText:
    """Text shown by one operator, with its origin in user space."""

    text: str
    x: float
    y: float
    font_size: float
    # Advance per character; zero means "estimate from font_size".
    char_width: float = 0.0


def _matrix_multiply(lhs: Matrix, rhs: Matrix) -> Matrix:
    a1, b1, c1, d1, e1, f1 = lhs
    a2, b2, c2, d2, e2, f2 = rhs
    return (
        a1 * a2 + c1 * b2,
        b1 * a2 + d1 * b2,
        a1 * c2 + c1 * d2,
        b1 * c2 + d1 * d2,
        a1 * e2 + c1 * f2 + e1,
        b1 * e2 + d1 * f2 + f1,
    )


def _matrix_apply(matrix: Matrix, x: float, y: float) -> tuple[float, float]:
    a, b, c, d, e, f = matrix
    return a * x + c * y + e, b * x + d * y + f


def _translation(tx: float, ty: float) -> Matrix:
    return (1.0, 0.0, 0.0, 1.0, tx, ty)


def _as_matrix(values: Any) -> Matrix | None:
    try:
        matrix = tuple(float(value) for value in values)
    except (TypeError, ValueError):
        return None
    if len(matrix) != 6:
        return None
    return matrix  # type: ignore[return-value]


# --------------------------------------------------------------------------
# Font translation maps
# --------------------------------------------------------------------------
def _hex_bytes(raw: bytes) -> bytes:
    digits = re.sub(rb"\s+", b"", raw)
    if len(digits) % 2:
        digits += b"0"
    return bytes.fromhex(digits.decode("ascii"))


def _unicode_text(raw: bytes) -> str:
    return _hex_bytes(raw).decode("utf-16-be", "ignore")


def parse_to_unicode(data: bytes) -> dict[str, str]:
    """Parse the ``bfchar`` and ``bfrange`` sections of a ToUnicode CMap.

    Keys are the source codes decoded as latin-1, one character per byte.
    """

    mapping: dict[str, str] = {}
    for section in _BFCHAR_RE.findall(data):
        for source, target in _HEX_PAIR_RE.findall(section):
            mapping[_hex_bytes(source).decode("latin-1")] = _unicode_text(target)

    for section in _BFRANGE_RE.findall(data):
        for low_raw, high_raw, target in _RANGE_ENTRY_RE.findall(section):
            low_bytes = _hex_bytes(low_raw)
            width = len(low_bytes)
            low = int.from_bytes(low_bytes, "big")
            high = int.from_bytes(_hex_bytes(high_raw), "big")
            if high < low or high - low > MAX_CMAP_RANGE:
                continue
            if target.startswith(b"["):
                targets = [_unicode_text(item) for item in _HEX_RE.findall(target)]
                for offset, text in enumerate(targets[: high - low + 1]):
                    code = (low + offset).to_bytes(width, "big").decode("latin-1")
                    mapping[code] = text
                continue
            start = _hex_bytes(target[1:-1])
            base = int.from_bytes(start, "big")
            for offset in range(high - low + 1):
                code = (low + offset).to_bytes(width, "big").decode("latin-1")
                value = (base + offset).to_bytes(max(len(start), 2), "big")
                mapping[code] = value.decode("utf-16-be", "ignore")
    return mapping


def apply_translation_map(raw: str, mapping: dict[str, str], max_key_length: int) -> str:
    """Translate ``raw`` codes greedily, longest code first."""

    output: list[str] = []
    position = 0
    while position < len(raw):
        for length in range(min(max_key_length, len(raw) - position), 0, -1):
            chunk = raw[position:position + length]
            if chunk in mapping:
                output.append(mapping[chunk])
                position += length
                break
        else:
            output.append(raw[position])
            position += 1
    return "".join(output)


@dataclass(slots=True)
class _FontMap:
    mapping: dict[str, str]
    max_key_length: int


def font_translation_maps(resources: Any) -> dict[str, _FontMap]:
    """Return ToUnicode maps keyed by the font resource name."""

    maps: dict[str, _FontMap] = {}
    try:
        fonts = resources.get_object().get("/Font") if resources is not None else None
        fonts = fonts.get_object() if fonts is not None else None
    except Exception as exc:
        LOGGER.debug("Unable to resolve font resources: %s", exc)
        return maps
    if not isinstance(fonts, DictionaryObject):
        return maps

    for name, reference in fonts.items():
        try:
            font = reference.get_object()
            to_unicode = font.get("/ToUnicode") if isinstance(font, DictionaryObject) else None
            if to_unicode is None:
                continue
            stream = to_unicode.get_object()
            if not isinstance(stream, StreamObject):
                continue
            mapping = parse_to_unicode(stream.get_data())
        except Exception as exc:
            LOGGER.debug("Ignoring ToUnicode map of font %s: %s", name, exc)
            continue
        if mapping:
            maps[str(name)] = _FontMap(mapping, max(len(key) for key in mapping))
    return maps


# --------------------------------------------------------------------------
# Content stream interpretation
# --------------------------------------------------------------------------
def _raw_string(operand: Any) -> str:
    """Return the operand's original bytes as a latin-1 string."""
    if isinstance(operand, (bytes, bytearray)):
        return bytes(operand).decode("latin-1")
    original = getattr(operand, "original_bytes", None)
    if isinstance(original, bytes):
        return original.decode("latin-1")
    return str(operand)


@dataclass
class _TextState:
    ctm: Matrix = IDENTITY_MATRIX
    font_name: str | None = None
    font_size: float = DEFAULT_FONT_SIZE
    char_spacing: float = 0.0
    word_spacing: float = 0.0
    horizontal_scaling: float = 1.0
    leading: float = 0.0

    def copy(self) -> "_TextState":
        return _TextState(
            ctm=self.ctm,
            font_name=self.font_name,
            font_size=self.font_size,
            char_spacing=self.char_spacing,
            word_spacing=self.word_spacing,
            horizontal_scaling=self.horizontal_scaling,
            leading=self.leading,
        )


class _ContentInterpreter:
    """Walks content stream operators and records each shown string."""

    def __init__(self, reader: PdfReader | None) -> None:
        self.reader = reader
        self.fragments: list[CapturedText] = []

    def run(self, content: ContentStream | None, resources: Any, state: _TextState, depth: int = 0) -> None:
        if content is None:
            return
        font_maps = font_translation_maps(resources)
        stack: list[_TextState] = []
        text_matrix: Matrix = IDENTITY_MATRIX
        line_matrix: Matrix = IDENTITY_MATRIX

        def next_line(tx: float, ty: float) -> None:
            nonlocal text_matrix, line_matrix
            line_matrix = _matrix_multiply(line_matrix, _translation(tx, ty))
            text_matrix = line_matrix

        def show(operand: Any) -> None:
            nonlocal text_matrix
            raw = _raw_string(operand)
            if not raw:
                return
            font_map = font_maps.get(state.font_name or "")
            if font_map is not None:
                text = apply_translation_map(raw, font_map.mapping, font_map.max_key_length)
            elif isinstance(operand, str):
                text = str(operand)
            else:
                text = raw
            text_matrix = self._emit(text, state, text_matrix)

        for operands, operator in content.operations:
            if operator == b"q":
                stack.append(state.copy())
            elif operator == b"Q":
                if stack:
                    state = stack.pop()
            elif operator == b"cm":
                matrix = _as_matrix(operands)
                if matrix is not None:
                    state.ctm = _matrix_multiply(state.ctm, matrix)
            elif operator == b"BT":
                text_matrix = IDENTITY_MATRIX
                line_matrix = IDENTITY_MATRIX
            elif operator == b"Tf" and len(operands) >= 2:
                state.font_name = str(operands[0])
                try:
                    state.font_size = float(operands[1])
                except (TypeError, ValueError):
                    pass
            elif operator == b"Tc" and operands:
                state.char_spacing = float(operands[0])
            elif operator == b"Tw" and operands:
                state.word_spacing = float(operands[0])
            elif operator == b"Tz" and operands:
                state.horizontal_scaling = float(operands[0]) / 100.0
            elif operator == b"TL" and operands:
                state.leading = float(operands[0])
            elif operator == b"Tm":
                matrix = _as_matrix(operands[:6])
                if matrix is not None:
                    text_matrix = line_matrix = matrix
            elif operator in (b"Td", b"TD") and len(operands) >= 2:
                tx, ty = float(operands[0]), float(operands[1])
                if operator == b"TD":
                    state.leading = -ty
                next_line(tx, ty)
            elif operator == b"T*":
                next_line(0.0, -self._leading(state))
            elif operator == b"Tj" and operands:
                show(operands[0])
            elif operator == b"'" and operands:
                next_line(0.0, -self._leading(state))
                show(operands[0])
            elif operator == b'"' and len(operands) >= 3:
                state.word_spacing = float(operands[0])
                state.char_spacing = float(operands[1])
                next_line(0.0, -self._leading(state))
                show(operands[2])
            elif operator == b"TJ" and operands:
                for item in operands[0]:
                    if isinstance(item, (str, bytes)):
                        show(item)
                        continue
                    try:
                        adjustment = float(item)
                    except (TypeError, ValueError):
                        continue
                    shift = -adjustment / 1000.0 * state.font_size * state.horizontal_scaling
                    text_matrix = _matrix_multiply(text_matrix, _translation(shift, 0.0))
            elif operator == b"Do" and operands:
                self._run_form(operands[0], resources, state, depth)

    @staticmethod
    def _leading(state: _TextState) -> float:
        return state.leading or DEFAULT_LEADING_FACTOR * state.font_size

    def _emit(self, text: str, state: _TextState, text_matrix: Matrix) -> Matrix:
        combined = _matrix_multiply(state.ctm, text_matrix)
        x, y = _matrix_apply(combined, 0.0, 0.0)
        a, b = combined[0], combined[1]
        scale = (a * a + b * b) ** 0.5 or 1.0
        font_size = abs(state.font_size) * scale or DEFAULT_FONT_SIZE

        # Advance in unscaled text space.
        glyph_advance = CHAR_WIDTH_FACTOR * state.font_size + state.char_spacing
        advance = len(text) * glyph_advance + text.count(" ") * state.word_spacing
        advance *= state.horizontal_scaling
        char_width = abs(glyph_advance * state.horizontal_scaling * scale)

        self.fragments.append(
            CapturedText(
                text=text,
                x=float(x),
                y=float(y),
                font_size=font_size,
                char_width=char_width or font_size * CHAR_WIDTH_FACTOR,
            )
        )
        return _matrix_multiply(text_matrix, _translation(advance, 0.0))

    def _run_form(self, name: Any, resources: Any, state: _TextState, depth: int) -> None:
        if depth >= MAX_FORM_DEPTH or resources is None:
            return
        try:
            xobjects = resources.get_object().get("/XObject")
            form = xobjects.get_object()[name].get_object() if xobjects is not None else None
        except Exception as exc:
            LOGGER.debug("Unable to resolve XObject %s: %s", name, exc)
            return
        if not isinstance(form, StreamObject) or form.get("/Subtype") != NameObject("/Form"):
            return

        form_state = state.copy()
        matrix = _as_matrix(form.get("/Matrix", IDENTITY_MATRIX))
        if matrix is not None:
            form_state.ctm = _matrix_multiply(state.ctm, matrix)
        self.run(
            ContentStream(form, self.reader),
            form.get("/Resources", resources),
            form_state,
            depth + 1,
        )


def capture_text_fragments(page: PageObject, reader: PdfReader | None = None) -> list[CapturedText]:
    """Collect positioned text from ``page`` in content-stream order."""

    interpreter = _ContentInterpreter(reader)
    interpreter.run(page.get_contents(), page.get("/Resources"), _TextState())
    return interpreter.fragments
