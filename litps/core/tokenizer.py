"""
PostScript Tokenizer

한 줄 단위 토크나이저 + DSC(%%) 헤더 추출

토큰 종류:
- NUMBER: 100, -1.5, .5, 1e3
- STRING: (Hello World), <48656C6C6F>
- NAME: /Helvetica
- OPERATOR: moveto, l, showpage, f* ...

괄호 문자열은 공백을 포함해도 닫는 ')'까지 하나의 토큰이다 (중첩 괄호 허용).
"""

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, List, Optional

from ..errors import MalformedToken
from .model import BoundingBox


class PSTokenType(Enum):
    """PostScript 토큰 타입"""
    NUMBER = "number"
    STRING = "string"
    NAME = "name"
    OPERATOR = "operator"


@dataclass
class PSToken:
    type: PSTokenType
    value: Any
    raw: str = ""
    pos: int = 0

    @property
    def is_number(self) -> bool:
        return self.type == PSTokenType.NUMBER

    @property
    def is_string(self) -> bool:
        return self.type == PSTokenType.STRING


class PSLexer:
    """
    PostScript 토크나이저 (pull 방식)

    for token in PSLexer("100 100 moveto"): ...
    문자열을 닫는 데 필요한 만큼만 앞을 읽는다.
    """

    WHITESPACE = ' \t\r\n\x00\x0c'
    DELIMITERS = '()<>[]{}/%'

    ESCAPES = {
        'n': '\n', 'r': '\r', 't': '\t', 'b': '\b', 'f': '\f',
        '(': '(', ')': ')', '\\': '\\',
    }

    def __init__(self, line: str):
        self.data = line
        self.pos = 0
        self.length = len(line)

    def __iter__(self) -> Iterator[PSToken]:
        while True:
            token = self.next_token()
            if token is None:
                return
            yield token

    def tokenize(self) -> List[PSToken]:
        """전체 토큰화"""
        return list(self)

    def _skip_whitespace(self):
        while self.pos < self.length and self.data[self.pos] in self.WHITESPACE:
            self.pos += 1

    def next_token(self) -> Optional[PSToken]:
        self._skip_whitespace()
        if self.pos >= self.length:
            return None

        start_pos = self.pos
        ch = self.data[self.pos]

        # 주석 - 줄 끝까지
        if ch == '%':
            self.pos = self.length
            return None

        if ch == '(':
            return self._read_string(start_pos)

        if ch == '<':
            if self.data[self.pos:self.pos + 2] == '<<':
                self.pos += 2
                return PSToken(PSTokenType.OPERATOR, '<<', '<<', start_pos)
            return self._read_hex_string(start_pos)

        if ch == '>':
            if self.data[self.pos:self.pos + 2] == '>>':
                self.pos += 2
                return PSToken(PSTokenType.OPERATOR, '>>', '>>', start_pos)
            raise MalformedToken(f"Unexpected '>' at column {self.pos}")

        if ch == ')':
            raise MalformedToken(f"Unbalanced ')' at column {self.pos}")

        # 배열/프로시저 구분자는 단독 연산자로 취급 (실행은 지원하지 않음)
        if ch in '[]{}':
            self.pos += 1
            return PSToken(PSTokenType.OPERATOR, ch, ch, start_pos)

        if ch == '/':
            self.pos += 1
            word = self._read_word()
            return PSToken(PSTokenType.NAME, word, '/' + word, start_pos)

        word = self._read_word()
        number = _to_number(word)
        if number is not None:
            return PSToken(PSTokenType.NUMBER, number, word, start_pos)
        return PSToken(PSTokenType.OPERATOR, word, word, start_pos)

    def _read_word(self) -> str:
        start = self.pos
        while self.pos < self.length:
            ch = self.data[self.pos]
            if ch in self.WHITESPACE or ch in self.DELIMITERS:
                break
            self.pos += 1
        return self.data[start:self.pos]

    def _read_string(self, start_pos: int) -> PSToken:
        """리터럴 문자열 읽기: (Hello (nested) World)"""
        self.pos += 1  # '(' 스킵
        result = []
        depth = 1

        while self.pos < self.length:
            ch = self.data[self.pos]

            if ch == '\\':
                self.pos += 1
                if self.pos >= self.length:
                    break
                esc = self.data[self.pos]
                if esc in self.ESCAPES:
                    result.append(self.ESCAPES[esc])
                    self.pos += 1
                elif esc in '01234567':
                    # 8진수 (최대 3자리)
                    octal = ''
                    while len(octal) < 3 and self.pos < self.length and self.data[self.pos] in '01234567':
                        octal += self.data[self.pos]
                        self.pos += 1
                    result.append(chr(int(octal, 8) & 0xFF))
                else:
                    result.append(esc)
                    self.pos += 1
                continue

            self.pos += 1
            if ch == '(':
                depth += 1
            elif ch == ')':
                depth -= 1
                if depth == 0:
                    raw = self.data[start_pos:self.pos]
                    return PSToken(PSTokenType.STRING, ''.join(result), raw, start_pos)
            result.append(ch)

        raise MalformedToken(f"Unterminated string starting at column {start_pos}")

    def _read_hex_string(self, start_pos: int) -> PSToken:
        """16진수 문자열 읽기: <48656C6C6F>"""
        self.pos += 1  # '<' 스킵
        hex_str = ''

        while self.pos < self.length:
            ch = self.data[self.pos]
            self.pos += 1
            if ch == '>':
                # 홀수 길이면 0 추가
                if len(hex_str) % 2 == 1:
                    hex_str += '0'
                text = bytes.fromhex(hex_str).decode('latin-1')
                return PSToken(PSTokenType.STRING, text, self.data[start_pos:self.pos], start_pos)
            if ch in self.WHITESPACE:
                continue
            if ch not in '0123456789ABCDEFabcdef':
                raise MalformedToken(f"Invalid hex character {ch!r} at column {self.pos - 1}")
            hex_str += ch

        raise MalformedToken(f"Unterminated hex string starting at column {start_pos}")


_NUMBER_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')
_RADIX_RE = re.compile(r'^(\d{1,2})#([0-9A-Za-z]+)$')


def _to_number(word: str) -> Optional[float]:
    """PostScript 숫자 (정수, 실수, 지수, radix 16#FF), 유한값만"""
    try:
        if _NUMBER_RE.match(word):
            value = float(word)
        else:
            match = _RADIX_RE.match(word)
            if not match or not 2 <= int(match.group(1)) <= 36:
                return None
            value = float(int(match.group(2), int(match.group(1))))
    except (ValueError, OverflowError):
        return None
    return value if math.isfinite(value) else None


def split_lines(text: str) -> List[str]:
    """줄 단위 분리 (끝의 CR 제거)"""
    return [line[:-1] if line.endswith('\r') else line for line in text.split('\n')]


# =============================================================================
# DSC 헤더
# =============================================================================

@dataclass
class DSCHeader:
    """%% 주석에서 추출한 문서 정보"""
    title: str = ""
    creator: str = ""
    bbox: BoundingBox = field(default_factory=BoundingBox)
    dsc_compliant: bool = False
    warnings: List[str] = field(default_factory=list)


def extract_dsc_header(lines: List[str]) -> DSCHeader:
    """
    %%Title:, %%Creator:, %%BoundingBox: 추출

    %% 로 시작하는 줄이 하나라도 있으면 DSC 문서로 간주한다.
    """
    header = DSCHeader()

    for line_no, line in enumerate(lines, 1):
        if not line.startswith('%%'):
            continue
        header.dsc_compliant = True

        if line.startswith('%%Title:'):
            header.title = line[8:].strip()
        elif line.startswith('%%Creator:'):
            header.creator = line[10:].strip()
        elif line.startswith('%%BoundingBox:'):
            bbox = parse_bounding_box(line[14:])
            if bbox is None:
                header.warnings.append(f"Line {line_no}: ignoring bounding box: {line.strip()}")
            else:
                header.bbox = bbox

    return header


def parse_bounding_box(value: str) -> Optional[BoundingBox]:
    """'llx lly urx ury' -> BoundingBox ((atend) 또는 형식 오류면 None)"""
    fields = value.split()
    if len(fields) != 4:
        return None
    numbers = [_to_number(f) for f in fields]
    if any(n is None for n in numbers):
        return None
    x1, y1, x2, y2 = numbers
    return BoundingBox(x1, y1, x2, y2, valid=True)
