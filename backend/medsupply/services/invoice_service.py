# Overview: Service-layer operations for invoices; join, fixed layout, 2x raster and paginated PDF output.

"""
Invoice rendering pipeline

    build_invoice()    sale + clients + products + settings -> InvoiceDocument
    layout()           InvoiceDocument -> Surface (positioned draw ops, 1x units)
    rasterize()        Surface -> Pillow bitmap at RASTER_SCALE
    paginate()         bitmap geometry -> page placements (pure)
    render_pdf()       bitmap + placements -> A4 PDF bytes (reportlab)

Pagination is pixel based: every page draws the same bitmap shifted up by
one page height, so a table row can be cut across two pages.
"""
from __future__ import annotations

import io
from dataclasses import dataclass, field
from datetime import datetime

from PIL import Image, ImageDraw, ImageFont
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from medsupply.time_utils import parse_iso_datetime
from .sales_store import UNKNOWN_CLIENT

# A4 in millimetres
PAGE_WIDTH_MM = 210
PAGE_HEIGHT_MM = 297

RASTER_SCALE = 2

# Width of an A4 sheet in CSS pixels at 96 dpi
SURFACE_WIDTH = 794
PADDING = 32

TAGLINE = "Medical Supplies & Services"
THANK_YOU = "Thank you for your business!"
UNKNOWN_PRODUCT = "Unknown Product"

INK = (17, 24, 39)
MUTED = (75, 85, 99)
RULE_STRONG = (209, 213, 219)
RULE_LIGHT = (229, 231, 235)


def invoice_filename(invoice_number: str) -> str:
    return f"invoice-{invoice_number}.pdf"


def format_cents(cents: int) -> str:
    sign = "-" if cents < 0 else ""
    dollars, rem = divmod(abs(cents), 100)
    return f"{sign}${dollars}.{rem:02d}"


def format_long_date(dt: datetime) -> str:
    return f"{dt:%B} {dt.day}, {dt.year}"


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PagePlacement:
    index: int
    y_offset: float


def scaled_height(bitmap_height: float, image_width: float, page_width: float = PAGE_WIDTH_MM) -> float:
    """Height of the bitmap once its width is scaled to the page width."""
    if image_width <= 0:
        raise ValueError("image_width must be positive")
    return bitmap_height * page_width / image_width


def paginate(
    bitmap_height: float,
    image_width: float,
    page_width: float = PAGE_WIDTH_MM,
    page_height: float = PAGE_HEIGHT_MM,
) -> list[PagePlacement]:
    """
    Vertical offsets at which to draw one tall image onto successive pages.

    The first page shows the image at offset 0. While the height left over
    after the current page is >= 0, another page is added with the image
    shifted up by one more page height. Content exactly N pages tall
    therefore yields N + 1 pages, the last one blank.
    """
    if page_height <= 0:
        raise ValueError("page_height must be positive")
    image_height = scaled_height(bitmap_height, image_width, page_width)

    pages = [PagePlacement(index=0, y_offset=0.0)]
    remaining = image_height - page_height
    offset = 0.0
    while remaining >= 0:
        offset -= page_height
        pages.append(PagePlacement(index=len(pages), y_offset=offset))
        remaining -= page_height
    return pages


# ---------------------------------------------------------------------------
# Joined invoice data
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InvoiceLine:
    description: str
    quantity: int
    unit_price_cents: int

    @property
    def amount_cents(self) -> int:
        return self.quantity * self.unit_price_cents


@dataclass
class InvoiceDocument:
    invoice_number: str
    date: datetime
    client_name: str
    client_address: str
    client_phone: str
    client_email: str
    lines: list[InvoiceLine]
    total_cents: int
    company: dict = field(default_factory=dict)
    logo: bytes | None = None

    @property
    def filename(self) -> str:
        return invoice_filename(self.invoice_number)


def build_invoice(
    sale: dict,
    clients: list[dict],
    products: list[dict],
    settings: dict | None,
    logo: bytes | None = None,
) -> InvoiceDocument:
    """Join a stored sale with the client, product and company records it references."""
    client = next((c for c in clients if c["id"] == sale["client_id"]), None)
    product_names = {p["id"]: p["name"] for p in products}

    created_at = sale["created_at"]
    if isinstance(created_at, str):
        created_at = parse_iso_datetime(created_at)

    return InvoiceDocument(
        invoice_number=sale["invoice_number"],
        date=created_at,
        client_name=client["name"] if client else UNKNOWN_CLIENT,
        client_address=(client or {}).get("address") or "",
        client_phone=(client or {}).get("phone") or "",
        client_email=(client or {}).get("email") or "",
        lines=[
            InvoiceLine(
                description=product_names.get(line["product_id"], UNKNOWN_PRODUCT),
                quantity=line["quantity"],
                unit_price_cents=line["unit_price_cents"],
            )
            for line in sale["lines"]
        ],
        # Stored total, never recomputed from the lines
        total_cents=sale["total_cents"],
        company=dict(settings or {}),
        logo=logo,
    )


# ---------------------------------------------------------------------------
# Layout and rasterization
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TextOp:
    x: float
    y: float
    text: str
    size: int
    fill: tuple = INK
    align: str = "left"


@dataclass(frozen=True)
class RuleOp:
    x0: float
    x1: float
    y: float
    width: int
    fill: tuple = RULE_LIGHT


@dataclass(frozen=True)
class LogoOp:
    x: float
    y: float
    height: int
    data: bytes


@dataclass
class Surface:
    width: int
    height: int
    ops: list = field(default_factory=list)


@dataclass
class RenderedInvoice:
    filename: str
    content: bytes
    pages: list[PagePlacement]
    bitmap_size: tuple[int, int]


class InvoiceRenderer:
    def __init__(self, scale: int = RASTER_SCALE, width: int = SURFACE_WIDTH):
        self.scale = scale
        self.width = width
        self._fonts: dict[int, ImageFont.ImageFont] = {}

    def _font(self, size: int):
        px = size * self.scale
        if px not in self._fonts:
            self._fonts[px] = ImageFont.load_default(size=px)
        return self._fonts[px]

    def layout(self, invoice: InvoiceDocument) -> Surface:
        company = invoice.company
        left = PADDING
        right = self.width - PADDING
        ops: list = []
        y = PADDING

        # Header
        title_x = left
        if invoice.logo:
            ops.append(LogoOp(x=left, y=y, height=64, data=invoice.logo))
            title_x = left + 80
        ops.append(TextOp(title_x, y + 8, company.get("name") or "", 24))
        ops.append(TextOp(title_x, y + 40, TAGLINE, 14, MUTED))
        ops.append(TextOp(right, y, "INVOICE", 20, align="right"))
        ops.append(TextOp(right, y + 30, f"#{invoice.invoice_number}", 14, MUTED, "right"))
        ops.append(TextOp(right, y + 50, format_long_date(invoice.date), 14, MUTED, "right"))
        y += 80 + 32

        # Bill to / payment details
        half = left + (right - left) // 2 + 16
        ops.append(TextOp(left, y, "Bill To:", 14, MUTED))
        ops.append(TextOp(half, y, "Payment Details:", 14, MUTED))
        ops.append(TextOp(half, y + 28, f"Due Date: {format_long_date(invoice.date)}", 14))
        row = y + 28
        for text in (invoice.client_name, invoice.client_address, invoice.client_phone, invoice.client_email):
            ops.append(TextOp(left, row, text, 14))
            row += 22
        y = row + 32

        # Line-item table
        columns = (right - 330, right - 160, right)
        ops.append(TextOp(left, y, "Description", 14))
        for x, heading in zip(columns, ("Quantity", "Unit Price", "Amount")):
            ops.append(TextOp(x, y, heading, 14, align="right"))
        y += 28
        ops.append(RuleOp(left, right, y, 2, RULE_STRONG))
        y += 8
        for line in invoice.lines:
            ops.append(TextOp(left, y, line.description, 14))
            ops.append(TextOp(columns[0], y, str(line.quantity), 14, align="right"))
            ops.append(TextOp(columns[1], y, format_cents(line.unit_price_cents), 14, align="right"))
            ops.append(TextOp(columns[2], y, format_cents(line.amount_cents), 14, align="right"))
            y += 24
            ops.append(RuleOp(left, right, y, 1))
            y += 8
        y += 16
        ops.append(TextOp(columns[1], y, "Total:", 16, align="right"))
        ops.append(TextOp(columns[2], y, format_cents(invoice.total_cents), 16, align="right"))
        y += 32 + 32

        # Footer
        ops.append(TextOp(left, y, THANK_YOU, 12, MUTED))
        y += 28
        ops.append(RuleOp(left, right, y, 1))
        y += 16
        for text in (
            company.get("name") or "",
            company.get("address") or "",
            f"Phone: {company.get('phone') or ''}",
            f"Email: {company.get('email') or ''}",
        ):
            ops.append(TextOp(left, y, text, 12, MUTED))
            y += 18

        return Surface(width=self.width, height=y + PADDING, ops=ops)

    def rasterize(self, surface: Surface) -> Image.Image:
        s = self.scale
        bitmap = Image.new("RGB", (surface.width * s, surface.height * s), "white")
        draw = ImageDraw.Draw(bitmap)

        for op in surface.ops:
            if isinstance(op, TextOp):
                font = self._font(op.size)
                x = op.x * s
                if op.align == "right":
                    x -= draw.textlength(op.text, font=font)
                draw.text((x, op.y * s), op.text, fill=op.fill, font=font)
            elif isinstance(op, RuleOp):
                draw.line([(op.x0 * s, op.y * s), (op.x1 * s, op.y * s)], fill=op.fill, width=op.width * s)
            elif isinstance(op, LogoOp):
                self._paste_logo(bitmap, op)
        return bitmap

    def _paste_logo(self, bitmap: Image.Image, op: LogoOp) -> None:
        s = self.scale
        try:
            logo = Image.open(io.BytesIO(op.data))
            logo.load()
        except OSError:
            # Unreadable logo: header keeps the company name only
            return
        logo = logo.convert("RGBA")
        logo.thumbnail((op.height * 2 * s, op.height * s))
        bitmap.paste(logo, (int(op.x * s), int(op.y * s)), logo)

    def render_pdf(self, bitmap: Image.Image, title: str = "", author: str = "") -> tuple[bytes, list[PagePlacement]]:
        bitmap_width, bitmap_height = bitmap.size
        image_height = scaled_height(bitmap_height, bitmap_width, PAGE_WIDTH_MM)
        pages = paginate(bitmap_height, bitmap_width, PAGE_WIDTH_MM, PAGE_HEIGHT_MM)

        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4)
        if title:
            pdf.setTitle(title)
        if author:
            pdf.setAuthor(author)

        reader = ImageReader(bitmap)
        for page in pages:
            # reportlab measures y from the bottom edge; offsets are from the top
            bottom = PAGE_HEIGHT_MM - (page.y_offset + image_height)
            pdf.drawImage(
                reader,
                0,
                bottom * mm,
                width=PAGE_WIDTH_MM * mm,
                height=image_height * mm,
            )
            pdf.showPage()
        pdf.save()
        return buffer.getvalue(), pages

    def render(self, invoice: InvoiceDocument) -> RenderedInvoice:
        bitmap = self.rasterize(self.layout(invoice))
        content, pages = self.render_pdf(
            bitmap,
            title=f"Invoice {invoice.invoice_number}",
            author=invoice.company.get("name") or "",
        )
        return RenderedInvoice(
            filename=invoice.filename,
            content=content,
            pages=pages,
            bitmap_size=bitmap.size,
        )
