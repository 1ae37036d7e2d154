"""
Undertaking PDF
===============

Renders the two-page internship undertaking for a submission.

Page 1 is the student's letter to the Principal: details block, the eleven
undertaking clauses and signature lines. Page 2 is the department
recommendation with the student's pending courses and remarks.

The layout is drawn on a ReportLab canvas top-down, one showPage() per page,
so the document is always exactly two A4 pages. Each page is measured first
and its font shrunk until the content ends above the footer. Text content is
built by the plain functions below so it can be checked without parsing PDF.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from io import BytesIO
from typing import Callable, List, Optional, Sequence, Tuple, Union
from xml.sax.saxutils import escape

from reportlab.lib.enums import TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph

from internship.core.config import settings
from internship.core.exceptions import DocumentGenerationError
from internship.core.logging_config import logger


PAGE_WIDTH, PAGE_HEIGHT = A4
LEFT_MARGIN = 50
TOP_MARGIN = 42
CONTENT_WIDTH = 480
FOOTER_Y = 40

BLANK_DEPARTMENT = "________________"


@dataclass
class UndertakingData:
    """Everything printed on the undertaking"""
    student_name: str
    roll_number: Optional[str]
    department_name: Optional[str]
    company_name: str
    company_address: Optional[str]
    start_date: Union[date, datetime]
    end_date: Union[date, datetime]
    supervisor_name: str
    supervisor_email: str
    department_guide: Optional[str]
    stipend: Optional[float] = 0
    pending_redo_courses: Optional[str] = None
    pending_ra_courses: Optional[str] = None
    pending_current_courses: Optional[str] = None
    remarks: Optional[str] = None
    issue_date: date = field(default_factory=date.today)
    submission_id: Optional[str] = None

    @property
    def filename(self) -> str:
        return f"Undertaking_{self.roll_number or self.submission_id or 'student'}.pdf"


def format_date(value: Union[date, datetime, None]) -> str:
    """DD-MM-YYYY"""
    if value is None:
        return ""
    return value.strftime("%d-%m-%Y")


def format_amount(value: Optional[float]) -> str:
    """Stipend without a trailing .0 for whole rupees"""
    if not value:
        return "0"
    amount = float(value)
    return str(int(amount)) if amount.is_integer() else f"{amount:.2f}"


# ============================================
# Text content
# ============================================

def letter_lines(data: UndertakingData) -> List[str]:
    """Date, addresses and subject that open page 1"""
    return [
        f"Date: {format_date(data.issue_date)}",
        "",
        "From:",
        f"{data.student_name} ({data.roll_number or ''})",
        "",
        "To",
        "The Principal",
        settings.INSTITUTION_SHORT_NAME,
        settings.INSTITUTION_CITY,
        "",
        f"Through : The Head of the Department, {data.department_name or BLANK_DEPARTMENT}",
        "",
        "Dear Sir,",
    ]


SUBJECT_LINE = "Sub: Undertaking while pursuing Internship/Project Work I in Industry / Institutions."


def details_block_lines(data: UndertakingData) -> List[str]:
    """Rows of the bordered details block"""
    return [
        f"Name & Address of the Industry/Institution : {data.company_name}, {data.company_address or ''}",
        f"Internship Period : From {format_date(data.start_date)} To {format_date(data.end_date)}",
        f"Guide from the Industry/Institution : {data.supervisor_name}, {data.supervisor_email}",
        f"Guide in the Department : {data.department_guide or ''}",
        f"Stipend receivable (if any): Rs.{format_amount(data.stipend)}",
    ]


def page_one_clauses(data: UndertakingData) -> List[str]:
    """The eleven numbered undertaking clauses"""
    clauses = [
        "I will be regular and sincere in carrying out my internship at the above organization and obey its rules.",
        "My attendance will be sent regularly to my department by the organization.",
        "I will attend all project work reviews scheduled in the department and submit the report on time.",
        "I will update the guide in college regularly through reports reviewed by the guide in the industry.",
        "I have completed all course work except Project Work I.",
        f"I have {data.pending_current_courses or 'no'} final semester elective courses to study under self-study mode.",
        "I have enclosed the offer letter for the internship.",
        "I am aware of internship rules and will abide by the Placement & Training Office regulations.",
        "I have enclosed my parent's permission letter.",
        "# I am not in receipt of any other scholarship/stipend.",
        "* If I intend to receive stipend, I am aware that I will not be eligible for PG Scholarship.",
    ]
    return [f"{idx}. {clause}" for idx, clause in enumerate(clauses, start=1)]


PAGE_ONE_FOOTNOTES = [
    "* Strike out if not applicable.",
    "# PG GATE student has to produce a letter from the company.",
]


def page_two_lines(data: UndertakingData) -> List[str]:
    """Academic details and remarks on the recommendation page"""
    return [
        "Academic details of the student:",
        f"NAME: {data.student_name}",
        f"Roll Number: {data.roll_number or ''}",
        "",
        f"Number of Pending Redo courses: {data.pending_redo_courses or 'None'}",
        f"Number of Pending RA courses: {data.pending_ra_courses or 'None'}",
        f"Pending Courses of current semester: {data.pending_current_courses or 'None'}",
        f"Remarks: {data.remarks or settings.DEFAULT_PROJECT_REMARKS}",
    ]


RECOMMENDATION = (
    "This student can be permitted to accept the internship and complete "
    "Project Work I within the specified time period."
)

PAGE_TWO_NOTES = [
    "* Strike out if not applicable.",
    "NOTE: 1. Original Form shall be submitted to Placement Office",
    "2. Photo copies shall be submitted to a) Academic section  b) Concerned Department",
]


# ============================================
# Drawing
# ============================================

FONT_SIZES = (10, 9, 8, 7, 6)
CONTENT_FLOOR = FOOTER_Y + 14


class _PageWriter:
    """
    Top-down text cursor over a canvas page.

    With draw=False nothing reaches the canvas and only the cursor moves,
    which is how a layout is measured before it is drawn.
    """

    def __init__(self, pdf: canvas.Canvas, font_size: float = 10, draw: bool = True):
        self.pdf = pdf
        self.draw = draw
        self.y = PAGE_HEIGHT - TOP_MARGIN
        self.font_size = font_size
        self.scale = font_size / 10
        self.leading = round(font_size * 1.3, 1)
        self.style = ParagraphStyle(
            "Undertaking",
            fontName="Helvetica",
            fontSize=font_size,
            leading=self.leading,
            alignment=TA_LEFT,
        )

    def gap(self, points: float) -> None:
        self.y -= points * self.scale

    def centered(self, text: str, font: str = "Helvetica-Bold", size: float = 12,
                 underline: bool = False) -> None:
        size = size * self.scale
        self.y -= size
        if self.draw:
            self.pdf.setFont(font, size)
            self.pdf.drawCentredString(PAGE_WIDTH / 2, self.y, text)
            if underline:
                width = self.pdf.stringWidth(text, font, size)
                self.pdf.line((PAGE_WIDTH - width) / 2, self.y - 2, (PAGE_WIDTH + width) / 2, self.y - 2)
        self.y -= size * 0.5

    def paragraph(self, text: str, x: float = LEFT_MARGIN, width: float = CONTENT_WIDTH,
                  space_after: float = 0) -> float:
        """Draw wrapped text at the cursor and return its height"""
        if not text:
            self.y -= self.leading
            return self.leading
        para = Paragraph(escape(text), self.style)
        _, height = para.wrapOn(self.pdf, width, PAGE_HEIGHT)
        self.y -= height
        if self.draw:
            para.drawOn(self.pdf, x, self.y)
        self.y -= space_after * self.scale
        return height

    def lines(self, texts: Sequence[str], space_after: float = 0) -> None:
        for text in texts:
            self.paragraph(text, space_after=space_after)

    def row(self, labels: Sequence[Tuple[float, str]]) -> None:
        """Labels placed side by side at fixed x positions"""
        self.y -= self.leading
        if self.draw:
            self.pdf.setFont("Helvetica", self.font_size)
            for x, label in labels:
                self.pdf.drawString(x, self.y, label)

    def box(self, top: float) -> None:
        """Border from `top` down to the cursor"""
        if self.draw:
            self.pdf.rect(LEFT_MARGIN, self.y, CONTENT_WIDTH + 20, top - self.y, stroke=1, fill=0)

    def footer(self, text: str) -> None:
        if self.draw:
            self.pdf.setFont("Helvetica", 9)
            self.pdf.drawString(PAGE_WIDTH - 95, FOOTER_Y, text)


def _layout_page_one(page: _PageWriter, data: UndertakingData) -> None:
    page.centered(settings.INSTITUTION_NAME, size=14)
    page.gap(4)
    page.centered(settings.UNDERTAKING_TITLE, size=12, underline=True)
    page.gap(8)

    page.lines(letter_lines(data))
    page.gap(4)
    page.paragraph(SUBJECT_LINE)
    page.gap(8)

    # Bordered details block
    box_top = page.y
    page.gap(5)
    for text in details_block_lines(data):
        page.paragraph(text, x=LEFT_MARGIN + 5, width=CONTENT_WIDTH - 10, space_after=4)
    page.gap(2)
    page.box(box_top)
    page.gap(10)

    page.lines(page_one_clauses(data), space_after=3)
    page.gap(4)
    page.lines(PAGE_ONE_FOOTNOTES)
    page.gap(30)

    page.row([(70, "Tutor/Programme Co-ordinator"), (250, "Guide"), (400, "HoD")])
    page.gap(30)
    page.centered("(Signature of the Student)", font="Helvetica", size=10)

    page.footer("Page 1/2")


def _layout_page_two(page: _PageWriter, data: UndertakingData) -> None:
    page.centered("Recommendation from the Department", size=12)
    page.gap(10)

    page.lines(page_two_lines(data))
    page.gap(20)
    page.paragraph(RECOMMENDATION)
    page.gap(40)

    page.row([
        (70, "Tutor/Programme Coordinator"),
        (240, "Guide"),
        (330, "HoD"),
        (400, "Dean Placement & Training"),
    ])
    page.gap(50)
    page.row([(150, "Dean - Academic"), (400, "Principal")])
    page.gap(30)

    page.paragraph(PAGE_TWO_NOTES[0])
    page.paragraph(PAGE_TWO_NOTES[1])
    page.paragraph(PAGE_TWO_NOTES[2], x=LEFT_MARGIN + 30, width=CONTENT_WIDTH - 30)

    page.footer("Page 2/2")


PageLayout = Callable[[_PageWriter, UndertakingData], None]


def fit_font_size(pdf: canvas.Canvas, layout: PageLayout, data: UndertakingData) -> float:
    """
    Largest font size at which the page content ends above the footer.

    Raises DocumentGenerationError when even the smallest size overflows.
    """
    for size in FONT_SIZES:
        trial = _PageWriter(pdf, font_size=size, draw=False)
        layout(trial, data)
        if trial.y >= CONTENT_FLOOR:
            return size
    raise DocumentGenerationError(
        "Undertaking text does not fit on the page",
        submission_id=data.submission_id,
    )


def _draw_page(pdf: canvas.Canvas, layout: PageLayout, data: UndertakingData) -> None:
    size = fit_font_size(pdf, layout, data)
    if size != FONT_SIZES[0]:
        logger.info(f"[Undertaking] Shrinking text to {size}pt for submission {data.submission_id}")
    layout(_PageWriter(pdf, font_size=size), data)
    pdf.showPage()


def render_undertaking(data: UndertakingData) -> bytes:
    """Render the undertaking and return the PDF bytes"""
    buffer = BytesIO()
    try:
        pdf = canvas.Canvas(buffer, pagesize=A4)
        pdf.setTitle(f"Undertaking - {data.student_name}")
        pdf.setAuthor(settings.INSTITUTION_SHORT_NAME)
        pdf.setSubject(settings.UNDERTAKING_TITLE)

        _draw_page(pdf, _layout_page_one, data)
        _draw_page(pdf, _layout_page_two, data)

        pdf.save()
    except DocumentGenerationError as e:
        logger.error(f"[Undertaking] Cannot render PDF for {data.submission_id}: {e.message}")
        raise
    except Exception as e:
        logger.error(f"[Undertaking] Failed to render PDF for {data.submission_id}: {e}", exc_info=True)
        raise DocumentGenerationError(f"Failed to generate undertaking: {e}", submission_id=data.submission_id)

    pdf_bytes = buffer.getvalue()
    logger.info(f"[Undertaking] Rendered {len(pdf_bytes)} bytes for submission {data.submission_id}")
    return pdf_bytes
