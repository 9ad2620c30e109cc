"""
Reporting and Export Module for Rotation Scheduler

Handles PDF, Excel, and CSV export of a generated rotation. Every format uses
the same layout: one row per date with the workers on morning, evening and
night shift and those on leave.
"""

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from datetime import datetime, date
from typing import List, Optional, Sequence
import logging
from xml.sax.saxutils import escape

from .data_manager import WorkerRegistry, ScheduleEntry, ShiftType
from .scheduler_logic import group_entries_by_date

logger = logging.getLogger(__name__)

SCHEDULE_COLUMNS = ['Date', 'Morning Shift', 'Evening Shift', 'Night Shift', 'On Leave']
NAME_SEPARATOR = ", "
EMPTY_CELL = "-"

HEADER_COLOR = colors.Color(41 / 255, 128 / 255, 185 / 255)
ALTERNATE_ROW_COLOR = colors.Color(245 / 255, 245 / 255, 245 / 255)

FORMAT_EXTENSIONS = {'pdf': 'pdf', 'excel': 'xlsx', 'csv': 'csv'}


def format_long_date(value: date) -> str:
    """January 5, 2024"""
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def format_row_date(value: date) -> str:
    """Friday, Jan 5"""
    return f"{value.strftime('%A')}, {value.strftime('%b')} {value.day}"


def join_names(names: List[str]) -> str:
    return NAME_SEPARATOR.join(names) or EMPTY_CELL


class NumberedCanvas(canvas.Canvas):
    """Canvas that defers page output so each footer can show the page total"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []
        self.generated_on = datetime.now()

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(page_count)
            super().showPage()
        super().save()

    def _draw_footer(self, page_count: int):
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.grey)
        text = f"Generated on {self.generated_on.strftime('%m/%d/%Y')} - Page {self.getPageNumber()} of {page_count}"
        self.drawString(0.75 * inch, 0.4 * inch, text)


class ReportGenerator:
    """Builds the exported documents from a list of schedule entries"""

    def __init__(self, registry: Optional[WorkerRegistry] = None):
        self.registry = registry
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        """Setup custom report styles"""
        self.styles.add(ParagraphStyle(
            name='ScheduleTitle',
            parent=self.styles['Heading1'],
            fontSize=20,
            textColor=colors.Color(40 / 255, 40 / 255, 40 / 255),
            spaceAfter=10
        ))

        self.styles.add(ParagraphStyle(
            name='ScheduleSubtitle',
            parent=self.styles['Normal'],
            fontSize=12,
            textColor=colors.Color(100 / 255, 100 / 255, 100 / 255),
            spaceAfter=12
        ))

        self.styles.add(ParagraphStyle(
            name='ScheduleCell',
            parent=self.styles['Normal'],
            fontSize=9,
            leading=11
        ))

    def build_schedule_rows(self, entries: Sequence[ScheduleEntry]) -> List[List[str]]:
        """One row per referenced date, ordered by date, in SCHEDULE_COLUMNS order"""
        rows = []
        for day, groups in group_entries_by_date(entries).items():
            rows.append([
                format_row_date(day),
                join_names(groups[ShiftType.MORNING]),
                join_names(groups[ShiftType.EVENING]),
                join_names(groups[ShiftType.NIGHT]),
                join_names(groups[ShiftType.LEAVE]),
            ])
        return rows

    def export_schedule_pdf(self, entries: Sequence[ScheduleEntry], start_date: date,
                            end_date: date, output_path: str) -> bool:
        """Export the schedule table to a paginated PDF"""
        try:
            doc = SimpleDocTemplate(
                output_path,
                pagesize=A4,
                rightMargin=0.5*inch,
                leftMargin=0.75*inch,
                topMargin=0.75*inch,
                bottomMargin=0.75*inch,
                title="Monthly Work Shift Schedule"
            )

            story = []

            story.append(Paragraph("Monthly Work Shift Schedule", self.styles['ScheduleTitle']))
            date_range_text = f"{format_long_date(start_date)} - {format_long_date(end_date)}"
            story.append(Paragraph(date_range_text, self.styles['ScheduleSubtitle']))
            story.append(Spacer(1, 12))

            story.append(self._create_schedule_table(entries))

            doc.build(story, canvasmaker=NumberedCanvas)
            logger.info(f"Schedule PDF written to {output_path}")
            return True

        except Exception as e:
            logger.error(f"Error creating PDF: {e}", exc_info=True)
            return False

    def _create_schedule_table(self, entries: Sequence[ScheduleEntry]) -> Table:
        """Create the five-column schedule table"""
        cell_style = self.styles['ScheduleCell']
        data = [SCHEDULE_COLUMNS]
        for row in self.build_schedule_rows(entries):
            data.append([Paragraph(escape(value), cell_style) for value in row])

        table = Table(
            data,
            colWidths=[1.4*inch, 1.6*inch, 1.4*inch, 1.4*inch, 1.4*inch],
            repeatRows=1
        )

        style = [
            ('BACKGROUND', (0, 0), (-1, 0), HEADER_COLOR),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, 0), 10),
            ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('TOPPADDING', (0, 0), (-1, -1), 6),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.lightgrey),
        ]
        for row_index in range(2, len(data), 2):
            style.append(('BACKGROUND', (0, row_index), (-1, row_index), ALTERNATE_ROW_COLOR))

        table.setStyle(TableStyle(style))
        return table

    def export_schedule_excel(self, entries: Sequence[ScheduleEntry], output_path: str) -> bool:
        """Export schedule to Excel format with statistics and worker sheets"""
        try:
            with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
                schedule_df = self._create_schedule_dataframe(entries)
                schedule_df.to_excel(writer, sheet_name='Schedule', index=False)

                stats_df = self._create_statistics_dataframe()
                stats_df.to_excel(writer, sheet_name='Statistics', index=False)

                workers_df = self._create_worker_dataframe()
                workers_df.to_excel(writer, sheet_name='Workers', index=False)

                self._format_excel_worksheets(writer)

            return True

        except Exception as e:
            logger.error(f"Error exporting to Excel: {e}", exc_info=True)
            return False

    def _create_schedule_dataframe(self, entries: Sequence[ScheduleEntry]) -> pd.DataFrame:
        """Create schedule DataFrame for Excel and CSV export"""
        data = []
        for day, groups in group_entries_by_date(entries).items():
            data.append({
                'Date': day.strftime("%Y-%m-%d"),
                'Day': day.strftime("%A"),
                'Morning Shift': join_names(groups[ShiftType.MORNING]),
                'Evening Shift': join_names(groups[ShiftType.EVENING]),
                'Night Shift': join_names(groups[ShiftType.NIGHT]),
                'On Leave': join_names(groups[ShiftType.LEAVE]),
            })

        return pd.DataFrame(data, columns=['Date', 'Day'] + SCHEDULE_COLUMNS[1:])

    def _create_statistics_dataframe(self) -> pd.DataFrame:
        """Per-worker shift counts"""
        columns = ['Worker', 'Morning Shifts', 'Evening Shifts', 'Night Shifts', 'Leave Days', 'Total Shifts']
        if self.registry is None:
            return pd.DataFrame(columns=columns)

        data = []
        for name, stats in self.registry.calculate_worker_stats().items():
            data.append({
                'Worker': name,
                'Morning Shifts': stats['morning_shifts'],
                'Evening Shifts': stats['evening_shifts'],
                'Night Shifts': stats['night_shifts'],
                'Leave Days': stats['leave_days'],
                'Total Shifts': stats['total_shifts'],
            })

        return pd.DataFrame(data, columns=columns)

    def _create_worker_dataframe(self) -> pd.DataFrame:
        workers = self.registry.get_workers() if self.registry else []
        return pd.DataFrame([{'ID': w.id, 'Name': w.name} for w in workers], columns=['ID', 'Name'])

    def _format_excel_worksheets(self, writer):
        """Style header rows and fit column widths"""
        from openpyxl.styles import PatternFill, Font

        header_fill = PatternFill(start_color="2980B9", end_color="2980B9", fill_type="solid")
        header_font = Font(color="FFFFFF", bold=True)

        for worksheet in writer.sheets.values():
            for cell in worksheet[1]:
                cell.fill = header_fill
                cell.font = header_font

            for column in worksheet.columns:
                max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
                worksheet.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)

    def export_schedule_csv(self, entries: Sequence[ScheduleEntry], output_path: str) -> bool:
        """Export schedule to CSV format"""
        try:
            schedule_df = self._create_schedule_dataframe(entries)
            schedule_df.to_csv(output_path, index=False)
            return True

        except Exception as e:
            logger.error(f"Error exporting to CSV: {e}", exc_info=True)
            return False


class ExportManager:
    """Manager class for handling all export operations"""

    def __init__(self, registry: WorkerRegistry):
        self.registry = registry
        self.report_generator = ReportGenerator(registry)

    def export_schedule(self, format_type: str, output_path: str) -> bool:
        """Export the registry's current schedule in the given format"""
        format_type = format_type.lower()
        if format_type not in FORMAT_EXTENSIONS:
            raise ValueError(f"Unsupported format: {format_type}")

        entries = self.registry.get_schedule()
        if not entries:
            logger.warning("Export requested with no schedule: Please generate a schedule first")
            return False

        if format_type == 'pdf':
            return self.report_generator.export_schedule_pdf(
                entries, self.registry.start_date, self.registry.get_end_date(), output_path
            )
        elif format_type == 'excel':
            return self.report_generator.export_schedule_excel(entries, output_path)
        else:
            return self.report_generator.export_schedule_csv(entries, output_path)

    def get_default_filename(self, format_type: str) -> str:
        """Default export file name derived from the rotation start date"""
        extension = FORMAT_EXTENSIONS[format_type.lower()]
        return f"shift-schedule-{self.registry.start_date.strftime('%Y-%m-%d')}.{extension}"

    def format_for_path(self, output_path: str) -> str:
        """Map a file extension chosen in a save dialog to an export format"""
        file_extension = output_path.rsplit('.', 1)[-1].lower() if '.' in output_path else ''
        if file_extension == "xlsx":
            return "excel"
        elif file_extension == "csv":
            return "csv"
        return "pdf"
