"""PDF processing service: page rasterization for AI processing and report rendering."""

import asyncio
import html
import io
import logging
from typing import Callable, List, Optional, Tuple
import fitz

from annexure.config.settings import get_settings
from annexure.errors import DocumentProcessingError
from annexure.schemas.report import AnnexureReport, ReportCell

logger = logging.getLogger(__name__)

PageProgressCallback = Callable[[float], None]


def _render_page_png(pdf_document: fitz.Document, page_num: int, matrix: fitz.Matrix) -> bytes:
    pix = pdf_document[page_num].get_pixmap(matrix=matrix)
    return pix.tobytes("png")


async def convert_pdf_bytes_to_images(
    pdf_bytes: bytes,
    on_page_progress: Optional[PageProgressCallback] = None,
    zoom: Optional[float] = None,
) -> List[bytes]:
    """
    Convert PDF bytes to a list of images (one per page) using PyMuPDF.

    Args:
        pdf_bytes: PDF file content as bytes
        on_page_progress: Called with the completed fraction (0 < f <= 1) after each page
        zoom: Render zoom factor, defaults to the configured PDF_RENDER_ZOOM

    Returns:
        List[bytes]: List of image bytes in PNG format (one per page), in page order

    Raises:
        DocumentProcessingError: If the document cannot be opened or rendered
    """
    if not pdf_bytes:
        raise DocumentProcessingError("The uploaded document is empty")

    if zoom is None:
        zoom = get_settings().pdf_render_zoom

    try:
        logger.info("Opening PDF with PyMuPDF")
        pdf_document = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as e:
        logger.error(f"Error opening PDF: {str(e)}", exc_info=True)
        raise DocumentProcessingError(f"Failed to open PDF: {str(e)}") from e

    try:
        if pdf_document.needs_pass:
            raise DocumentProcessingError("The PDF is encrypted")

        page_count = len(pdf_document)
        logger.info(f"Processing {page_count} page(s)")

        image_bytes_list = []
        matrix = fitz.Matrix(zoom, zoom)
        for page_num in range(page_count):
            logger.debug(f"Processing page {page_num + 1}/{page_count}")
            # One worker-thread call per page; the event loop runs between pages
            image_bytes = await asyncio.to_thread(_render_page_png, pdf_document, page_num, matrix)
            image_bytes_list.append(image_bytes)

            if on_page_progress is not None:
                on_page_progress((page_num + 1) / page_count)

        logger.info(f"Successfully converted PDF to {len(image_bytes_list)} image(s)")
        return image_bytes_list

    except DocumentProcessingError:
        raise
    except Exception as e:
        logger.error(f"Error converting PDF bytes to images: {str(e)}", exc_info=True)
        raise DocumentProcessingError(f"Failed to convert PDF to images: {str(e)}") from e
    finally:
        pdf_document.close()


def _render_cell(cell: ReportCell, tag: str = "td") -> str:
    styles = [f"text-align: {cell.align};"]
    if cell.bold:
        styles.append("font-weight: bold;")
    colspan = f' colspan="{cell.col_span}"' if cell.col_span > 1 else ""
    return f'<{tag}{colspan} style="{" ".join(styles)}">{html.escape(cell.content)}</{tag}>'


def build_annexure_html(report: AnnexureReport) -> str:
    """Lay out the report projection as an HTML document xhtml2pdf can print."""
    header_lines = "\n".join(
        f'<tr><td class="label">{html.escape(line.label)}</td>'
        f"<td>{html.escape(line.value)}</td></tr>"
        for line in report.header
    )
    head_cells = "".join(
        f'<th style="text-align: {column.align};">{html.escape(column.title)}</th>'
        for column in report.columns
    )
    body_rows = "\n".join(
        "<tr>" + "".join(_render_cell(cell) for cell in row) + "</tr>"
        for row in report.rows
    )
    foot_cells = "".join(_render_cell(cell) for cell in report.footer)

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <style>
        @page {{
            size: A4;
            margin: 1.5cm 1.5cm 2cm 1.5cm;
            @frame footer_frame {{
                -pdf-frame-content: footer_content;
                left: 42pt;
                width: 511pt;
                top: 800pt;
                height: 20pt;
            }}
        }}
        body {{
            font-family: Helvetica, Arial, sans-serif;
            font-size: 10pt;
            color: #000;
        }}
        h1 {{
            font-size: 18pt;
            text-align: center;
            margin-bottom: 12pt;
        }}
        table.details td {{
            padding: 2pt 4pt;
            font-size: 11pt;
        }}
        table.details td.label {{
            font-weight: bold;
            width: 3cm;
        }}
        table.bills {{
            margin-top: 12pt;
            border: 0.5pt solid #ddd;
        }}
        table.bills th {{
            background-color: {report.head_fill_color};
            color: #fff;
            font-weight: bold;
            padding: 4pt;
        }}
        table.bills td {{
            padding: 4pt;
            border-bottom: 0.5pt solid #ddd;
        }}
        table.bills tr.total td {{
            background-color: {report.foot_fill_color};
            color: {report.foot_text_color};
        }}
        #footer_content {{
            font-size: 9pt;
        }}
    </style>
</head>
<body>
    <h1>{html.escape(report.title)}</h1>
    <table class="details">
        {header_lines}
    </table>
    <table class="bills" repeat="1">
        <tr>{head_cells}</tr>
        {body_rows}
        <tr class="total">{foot_cells}</tr>
    </table>
    <div id="footer_content">Page <pdf:pagenumber></div>
</body>
</html>"""


async def render_annexure_pdf(report: AnnexureReport) -> Tuple[bytes, int]:
    """
    Render the Annexure-I report projection to a paginated PDF.

    Args:
        report: Compiled report projection

    Returns:
        Tuple of (PDF bytes, page count)

    Raises:
        DocumentProcessingError: If xhtml2pdf fails to produce the document
    """
    from xhtml2pdf import pisa

    logger.info(f"Rendering annexure with {len(report.rows)} bill row(s)")
    html_document = build_annexure_html(report)

    pdf_buffer = io.BytesIO()
    pisa_status = pisa.CreatePDF(src=html_document, dest=pdf_buffer, encoding="utf-8")
    if pisa_status.err:
        logger.error(f"Error creating PDF: {pisa_status.err}")
        raise DocumentProcessingError(f"Failed to create PDF from HTML: {pisa_status.err}")

    pdf_bytes = pdf_buffer.getvalue()
    pdf_buffer.close()

    # The renderer does not report pagination, so read it back
    pdf_document = fitz.open(stream=pdf_bytes, filetype="pdf")
    page_count = pdf_document.page_count
    pdf_document.close()

    logger.info(f"Annexure PDF generated: {len(pdf_bytes)} bytes, {page_count} page(s)")
    return pdf_bytes, page_count
