"""
PDF Reader - 생성된 PDF 구조 검증용

클래식 XRef 테이블만 지원 (XRef 스트림, Object Stream, 필터 없음):
1. 헤더 (%PDF-x.y)
2. startxref -> xref 테이블 -> trailer
3. 객체 파싱 (dict, array, string, number, name, ref, stream)
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class PDFTokenType(Enum):
    """PDF 토큰 타입"""
    NUMBER = "number"
    STRING = "string"          # (hello)
    NAME = "name"              # /Type
    KEYWORD = "keyword"        # obj, endobj, R, stream, true, null ...
    DICT_START = "dict_start"  # <<
    DICT_END = "dict_end"      # >>
    ARRAY_START = "array_start"
    ARRAY_END = "array_end"


@dataclass
class PDFToken:
    type: PDFTokenType
    value: Any
    pos: int


@dataclass(frozen=True)
class PDFRef:
    """객체 참조 (예: 1 0 R)"""
    obj_num: int
    gen_num: int = 0

    def __repr__(self):
        return f"Ref({self.obj_num} {self.gen_num} R)"


@dataclass
class XRefEntry:
    offset: int
    gen_num: int
    in_use: bool


@dataclass
class PDFFile:
    """읽어 들인 PDF"""
    version: str = ""
    xref: Dict[int, XRefEntry] = field(default_factory=dict)
    xref_offset: int = 0
    trailer: Dict[str, Any] = field(default_factory=dict)


class PDFLexer:
    """바이트 -> 토큰"""

    WHITESPACE = b' \t\n\r\x00\x0c'
    DELIMITERS = b'()<>[]{}/%'

    def __init__(self, data: bytes, pos: int = 0):
        self.data = data
        self.pos = pos
        self.length = len(data)

    def skip_whitespace(self):
        while self.pos < self.length:
            ch = self.data[self.pos:self.pos + 1]
            if ch in self.WHITESPACE:
                self.pos += 1
            elif ch == b'%':
                while self.pos < self.length and self.data[self.pos:self.pos + 1] not in b'\r\n':
                    self.pos += 1
            else:
                break

    def read_token(self) -> Optional[PDFToken]:
        self.skip_whitespace()
        if self.pos >= self.length:
            return None

        start = self.pos
        two = self.data[self.pos:self.pos + 2]
        ch = two[:1]

        if two == b'<<':
            self.pos += 2
            return PDFToken(PDFTokenType.DICT_START, "<<", start)
        if two == b'>>':
            self.pos += 2
            return PDFToken(PDFTokenType.DICT_END, ">>", start)
        if ch == b'[':
            self.pos += 1
            return PDFToken(PDFTokenType.ARRAY_START, "[", start)
        if ch == b']':
            self.pos += 1
            return PDFToken(PDFTokenType.ARRAY_END, "]", start)
        if ch == b'(':
            return PDFToken(PDFTokenType.STRING, self._read_string(), start)
        if ch == b'/':
            self.pos += 1
            return PDFToken(PDFTokenType.NAME, self._read_regular().decode('latin-1'), start)

        word = self._read_regular()
        if not word:
            raise ValueError(f"Unexpected character {ch!r} at position {start}")
        text = word.decode('latin-1')
        try:
            value = float(text) if '.' in text else int(text)
            return PDFToken(PDFTokenType.NUMBER, value, start)
        except ValueError:
            return PDFToken(PDFTokenType.KEYWORD, text, start)

    def _read_regular(self) -> bytes:
        start = self.pos
        while self.pos < self.length:
            ch = self.data[self.pos:self.pos + 1]
            if ch in self.WHITESPACE or ch in self.DELIMITERS:
                break
            self.pos += 1
        return self.data[start:self.pos]

    def _read_string(self) -> bytes:
        """(...) - 이스케이프는 백슬래시 다음 문자를 그대로"""
        self.pos += 1
        result = bytearray()
        depth = 1
        while self.pos < self.length:
            ch = self.data[self.pos]
            self.pos += 1
            if ch == 0x5C:  # '\'
                if self.pos < self.length:
                    result.append(self.data[self.pos])
                    self.pos += 1
                continue
            if ch == 0x28:  # '('
                depth += 1
            elif ch == 0x29:  # ')'
                depth -= 1
                if depth == 0:
                    return bytes(result)
            result.append(ch)
        raise ValueError("Unterminated string")


class PDFReader:
    """클래식 XRef 기반 PDF 읽기"""

    def __init__(self, data: bytes):
        self.data = data
        self.lexer = PDFLexer(data)
        self.file = PDFFile()

    def read(self) -> PDFFile:
        match = re.match(rb'%PDF-(\d+\.\d+)', self.data)
        if not match:
            raise ValueError("Invalid PDF: missing header")
        self.file.version = match.group(1).decode('ascii')

        eof_pos = self.data.rfind(b'%%EOF')
        if eof_pos == -1:
            raise ValueError("Invalid PDF: missing %%EOF")
        startxref_pos = self.data.rfind(b'startxref', 0, eof_pos)
        if startxref_pos == -1:
            raise ValueError("Invalid PDF: missing startxref")

        self.file.xref_offset = int(self.data[startxref_pos + 9:eof_pos].split()[0])
        self._read_xref(self.file.xref_offset)
        return self.file

    def _read_xref(self, offset: int):
        if self.data[offset:offset + 4] != b'xref':
            raise ValueError(f"Invalid PDF: no xref table at offset {offset}")

        self.lexer.pos = offset + 4
        while True:
            token = self.lexer.read_token()
            if token is None:
                raise ValueError("Invalid PDF: missing trailer")
            if token.type == PDFTokenType.KEYWORD and token.value == 'trailer':
                break
            if token.type != PDFTokenType.NUMBER:
                raise ValueError(f"Unexpected token in xref: {token.value!r}")

            start_obj = token.value
            count = self.lexer.read_token().value

            for i in range(count):
                self.lexer.skip_whitespace()
                # 20바이트 고정 형식: OOOOOOOOOO GGGGG n/f
                entry = self.data[self.lexer.pos:self.lexer.pos + 20]
                if len(entry) < 18:
                    raise ValueError("Truncated xref entry")
                self.file.xref[start_obj + i] = XRefEntry(
                    offset=int(entry[0:10]),
                    gen_num=int(entry[11:16]),
                    in_use=entry[17:18] == b'n',
                )
                self.lexer.pos += 20

        trailer = self._parse_value()
        if not isinstance(trailer, dict):
            raise ValueError("Invalid PDF: trailer is not a dictionary")
        self.file.trailer = trailer

    def get_object(self, obj_num: int) -> Any:
        """xref 오프셋에서 객체 파싱"""
        entry = self.file.xref.get(obj_num)
        if entry is None or not entry.in_use:
            raise KeyError(obj_num)

        self.lexer.pos = entry.offset
        header = [self.lexer.read_token() for _ in range(3)]
        if (header[0] is None or header[0].value != obj_num
                or header[2] is None or header[2].value != 'obj'):
            raise ValueError(f"Expected 'obj {obj_num}' at offset {entry.offset}")

        value = self._parse_value()
        self.lexer.skip_whitespace()
        if self.data[self.lexer.pos:self.lexer.pos + 6] == b'stream':
            value = self._parse_stream(value)
        return value

    def _parse_value(self) -> Any:
        token = self.lexer.read_token()
        if token is None:
            raise ValueError("Unexpected end of file")

        if token.type == PDFTokenType.DICT_START:
            result = {}
            while True:
                key = self.lexer.read_token()
                if key is None:
                    raise ValueError("Unexpected end of file in dictionary")
                if key.type == PDFTokenType.DICT_END:
                    return result
                if key.type != PDFTokenType.NAME:
                    raise ValueError(f"Expected name in dictionary, got {key.value!r}")
                result[key.value] = self._parse_value()

        if token.type == PDFTokenType.ARRAY_START:
            result = []
            while True:
                saved = self.lexer.pos
                item = self.lexer.read_token()
                if item is None:
                    raise ValueError("Unexpected end of file in array")
                if item.type == PDFTokenType.ARRAY_END:
                    return result
                self.lexer.pos = saved
                result.append(self._parse_value())

        # number number R
        if token.type == PDFTokenType.NUMBER and isinstance(token.value, int):
            saved = self.lexer.pos
            gen = self.lexer.read_token()
            if gen is not None and gen.type == PDFTokenType.NUMBER:
                r = self.lexer.read_token()
                if r is not None and r.type == PDFTokenType.KEYWORD and r.value == 'R':
                    return PDFRef(token.value, int(gen.value))
            self.lexer.pos = saved

        return token.value

    def _parse_stream(self, stream_dict: Dict[str, Any]) -> Dict[str, Any]:
        self.lexer.pos += 6
        if self.data[self.lexer.pos:self.lexer.pos + 2] == b'\r\n':
            self.lexer.pos += 2
        elif self.data[self.lexer.pos:self.lexer.pos + 1] == b'\n':
            self.lexer.pos += 1

        length = stream_dict.get('Length', 0)
        stream_dict['_stream_data'] = self.data[self.lexer.pos:self.lexer.pos + length]
        self.lexer.pos += length
        return stream_dict

    def page_objects(self) -> List[Tuple[int, Dict[str, Any]]]:
        """Catalog -> Pages -> Kids 순서의 (id, Page dict)"""
        root = self.file.trailer.get('Root')
        catalog = self.get_object(root.obj_num)
        pages = self.get_object(catalog['Pages'].obj_num)
        return [(kid.obj_num, self.get_object(kid.obj_num)) for kid in pages.get('Kids', [])]


def read_pdf(data: bytes) -> PDFReader:
    reader = PDFReader(data)
    reader.read()
    return reader


def verify_pdf(data: bytes) -> List[str]:
    """
    생성된 PDF 구조 검증

    Returns:
        문제 목록 (비어 있으면 정상)
    """
    try:
        reader = read_pdf(data)
    except ValueError as e:
        return [str(e)]

    problems = []
    pdf = reader.file

    if data[pdf.xref_offset:pdf.xref_offset + 4] != b'xref':
        problems.append(f"startxref {pdf.xref_offset} does not point at 'xref'")

    size = pdf.trailer.get('Size')
    if size != len(pdf.xref):
        problems.append(f"/Size {size} does not match {len(pdf.xref)} xref entries")

    head = pdf.xref.get(0)
    if head is None or head.in_use or head.gen_num != 65535:
        problems.append("xref entry 0 is not the free-list head")

    for obj_num, entry in sorted(pdf.xref.items()):
        if not entry.in_use:
            continue
        marker = f"{obj_num} 0 obj".encode('ascii')
        if data[entry.offset:entry.offset + len(marker)] != marker:
            problems.append(f"xref offset {entry.offset} of object {obj_num} does not point at its marker")

    root = pdf.trailer.get('Root')
    if not isinstance(root, PDFRef) or root.obj_num not in pdf.xref:
        problems.append("trailer /Root is missing or dangling")
        return problems

    try:
        for page_id, page in reader.page_objects():
            if page.get('Type') != 'Page':
                problems.append(f"object {page_id} in /Kids is not a Page")
                continue
            contents = page.get('Contents')
            if not isinstance(contents, PDFRef) or contents.obj_num != page_id + 1:
                problems.append(f"page {page_id} /Contents is not the following object")
                continue
            stream = reader.get_object(contents.obj_num)
            if '_stream_data' not in stream:
                problems.append(f"object {contents.obj_num} is not a stream")
    except (KeyError, ValueError, AttributeError, TypeError) as e:
        problems.append(f"broken object graph: {e!r}")

    return problems
