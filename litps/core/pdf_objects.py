"""
PDF 객체 그래프 생성

고정 순서:
    1. Catalog         (/Pages -> 2)
    2. Pages           (/Kids = 이후 생성되는 Page id들, /Count)
    3. Page, Contents  (페이지마다 한 쌍, Contents는 Page 바로 다음 id)
    4. Font            (공유 Helvetica)
    5. Info            (Title, Creator, Producer)

객체 id는 생성 순서대로 1부터 할당되고 재사용되지 않는다.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..options import ConversionOptions, PRODUCER
from .content_stream import ContentStreamRenderer, escape_pdf_string, format_number
from .model import PageModel


@dataclass
class PDFObject:
    """직렬화 대기 중인 PDF 객체"""
    id: int
    content: bytes
    offset: int = 0  # 직렬화 시 기록


@dataclass
class PDFObjectGraph:
    """빌드 결과"""
    objects: List[PDFObject] = field(default_factory=list)
    catalog_id: int = 0
    pages_id: int = 0
    page_ids: List[int] = field(default_factory=list)
    content_ids: List[int] = field(default_factory=list)
    font_id: int = 0
    info_id: Optional[int] = None


class PDFObjectBuilder:
    """PageModel -> PDF 객체 목록"""

    def __init__(self, options: ConversionOptions = None,
                 renderer: ContentStreamRenderer = None):
        self.options = options or ConversionOptions()
        self.renderer = renderer or ContentStreamRenderer()
        self.objects: List[PDFObject] = []
        self.next_id = 1

    def _allocate_id(self) -> int:
        obj_id = self.next_id
        self.next_id += 1
        return obj_id

    def _add(self, obj_id: int, content: bytes) -> PDFObject:
        obj = PDFObject(obj_id, content)
        self.objects.append(obj)
        return obj

    def build(self, model: PageModel) -> PDFObjectGraph:
        self.objects = []
        self.next_id = 1
        graph = PDFObjectGraph()

        page_count = len(model.pages)

        # id 선할당: Page/Contents 쌍 다음에 Font
        graph.catalog_id = self._allocate_id()
        graph.pages_id = self._allocate_id()
        for _ in range(page_count):
            graph.page_ids.append(self._allocate_id())
            graph.content_ids.append(self._allocate_id())
        graph.font_id = self._allocate_id()
        graph.info_id = self._allocate_id()

        # Catalog
        self._add(graph.catalog_id, _dict_body([
            "/Type /Catalog",
            f"/Pages {graph.pages_id} 0 R",
        ]))

        # Pages
        kids = ' '.join(f"{page_id} 0 R" for page_id in graph.page_ids)
        self._add(graph.pages_id, _dict_body([
            "/Type /Pages",
            f"/Count {page_count}",
            f"/Kids [{kids}]",
        ]))

        # Page + Contents
        for page, page_id, content_id in zip(model.pages, graph.page_ids, graph.content_ids):
            media_box = f"[0 0 {format_number(page.width, 3)} {format_number(page.height, 3)}]"
            self._add(page_id, _dict_body([
                "/Type /Page",
                f"/Parent {graph.pages_id} 0 R",
                f"/MediaBox {media_box}",
                f"/Contents {content_id} 0 R",
                "/Resources <<",
                f"  /Font << /{ContentStreamRenderer.FONT_RESOURCE} {graph.font_id} 0 R >>",
                ">>",
            ]))

            stream = self.renderer.render(page)
            self._add(content_id, _stream_body(stream))

        # Font
        self._add(graph.font_id, _dict_body([
            "/Type /Font",
            "/Subtype /Type1",
            "/BaseFont /Helvetica",
        ]))

        # Info
        title = self.options.title or model.title
        creator = self.options.creator or model.creator
        info = []
        if title:
            info.append(f"/Title ({escape_pdf_string(title)})")
        if creator:
            info.append(f"/Creator ({escape_pdf_string(creator)})")
        info.append(f"/Producer ({escape_pdf_string(PRODUCER)})")
        self._add(graph.info_id, _dict_body(info))

        graph.objects = self.objects
        return graph


def _dict_body(entries: List[str]) -> bytes:
    text = "<<\n" + ''.join(f"{entry}\n" for entry in entries) + ">>\n"
    return text.encode('latin-1', errors='replace')


def _stream_body(data: bytes) -> bytes:
    header = f"<<\n/Length {len(data)}\n>>\nstream\n".encode('ascii')
    return header + data + b"endstream\n"
