"""Export functionality for generated timetable previews."""

import json
from abc import ABC, abstractmethod
from pathlib import Path

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .constants import FREE_PERIOD_LABEL
from .generator import sort_periods
from .models import Day, GeneratedPeriod, GenerationPreview

# Fonts
FONT_HEADER = Font(name="Calibri", size=11, bold=True)
FONT_CELL = Font(name="Calibri", size=10, bold=False)

# Alignments
ALIGN_CENTER = Alignment(horizontal="center", vertical="center", wrap_text=True)

# Borders
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

# Fills
FILL_NON_LESSON = PatternFill(start_color="DDDDDD", end_color="DDDDDD", fill_type="solid")
FILL_WARNING = PatternFill(start_color="FFE699", end_color="FFE699", fill_type="solid")

GRID_TIME_COLUMN_WIDTH = 14.0
GRID_DAY_COLUMN_WIDTH = 28.0


def period_rows(periods: list[GeneratedPeriod]) -> list[dict]:
    """Flatten periods into export rows."""
    rows = []
    for period in sort_periods(periods):
        rows.append(
            {
                "day": period.day.value,
                "start_time": period.start_time,
                "end_time": period.end_time,
                "slot_type": period.slot_type.value,
                "unit_id": period.unit_id or "",
                "unit_name": period.unit_name or "",
                "teacher_id": period.teacher_id or "",
                "teacher_name": period.teacher_name or "",
                "has_warning": period.has_warning,
                "warning_message": period.warning_message or "",
            }
        )
    return rows


def grid_cell_text(period: GeneratedPeriod) -> str:
    """Text shown for a period in the weekly grid."""
    if not period.is_lesson:
        return period.slot_type.value.capitalize()
    if period.is_free:
        return FREE_PERIOD_LABEL
    if period.teacher_name:
        return f"{period.unit_name}\n{period.teacher_name}"
    return period.unit_name or ""


class BaseExporter(ABC):
    """Base class for exporters."""

    @abstractmethod
    def export(self, preview: GenerationPreview, output_path: str | Path) -> None:
        """Export a preview to file.

        Args:
            preview: GenerationPreview to export
            output_path: Path to output file or directory
        """
        pass


class JSONExporter(BaseExporter):
    """Export to JSON format."""

    def __init__(self, indent: int = 2, ensure_ascii: bool = False):
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    def export(self, preview: GenerationPreview, output_path: str | Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(
                preview.to_dict(),
                f,
                indent=self.indent,
                ensure_ascii=self.ensure_ascii,
            )


class CSVExporter(BaseExporter):
    """Export to CSV format (multiple files)."""

    def export(self, preview: GenerationPreview, output_path: str | Path) -> None:
        """Export a preview to CSV files.

        Creates three files:
        - periods.csv: All periods
        - teacher_loads.csv: Per-teacher, per-unit load summary
        - warnings.csv: Analysis warnings

        Args:
            preview: GenerationPreview to export
            output_path: Path to output directory
        """
        output_dir = Path(output_path)
        output_dir.mkdir(parents=True, exist_ok=True)

        pd.DataFrame(period_rows(preview.periods)).to_csv(
            output_dir / "periods.csv", index=False
        )

        loads = [a.to_dict() for a in preview.analysis.teacher_assignments]
        columns = [
            "teacher_id",
            "teacher_name",
            "unit_id",
            "unit_name",
            "period_count",
            "total_load",
            "status",
        ]
        pd.DataFrame(loads, columns=columns).to_csv(
            output_dir / "teacher_loads.csv", index=False
        )

        pd.DataFrame({"warning": preview.analysis.warnings}).to_csv(
            output_dir / "warnings.csv", index=False
        )


class ExcelExporter(BaseExporter):
    """Export to Excel format (single workbook with multiple sheets)."""

    def export(self, preview: GenerationPreview, output_path: str | Path) -> None:
        """Export a preview to an Excel workbook.

        Creates workbook with sheets:
        - Timetable: Weekly grid, time slots by weekday
        - Periods: All periods as rows
        - Teacher Loads: Load summary per teacher and unit
        - Summary: Analysis counts
        - Warnings: Warning list

        Args:
            preview: GenerationPreview to export
            output_path: Path to output Excel file
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            self._export_grid_sheet(preview, writer)
            self._export_periods_sheet(preview, writer)
            self._export_loads_sheet(preview, writer)
            self._export_summary_sheet(preview, writer)
            self._export_warnings_sheet(preview, writer)

    def _export_grid_sheet(self, preview: GenerationPreview, writer: pd.ExcelWriter) -> None:
        """Write the weekly grid and style it."""
        slots = sorted({(p.start_time, p.end_time) for p in preview.periods})
        by_key = {p.key: p for p in preview.periods}
        days = list(Day)

        rows = []
        for start_time, end_time in slots:
            row = {"Time": f"{start_time}-{end_time}"}
            for day in days:
                period = by_key.get((day.value, start_time, end_time))
                row[day.value.capitalize()] = grid_cell_text(period) if period else ""
            rows.append(row)

        columns = ["Time"] + [day.value.capitalize() for day in days]
        pd.DataFrame(rows, columns=columns).to_excel(writer, sheet_name="Timetable", index=False)

        ws = writer.sheets["Timetable"]
        ws.column_dimensions["A"].width = GRID_TIME_COLUMN_WIDTH
        for col_index in range(2, len(columns) + 1):
            ws.column_dimensions[get_column_letter(col_index)].width = GRID_DAY_COLUMN_WIDTH

        for cell in ws[1]:
            cell.font = FONT_HEADER
            cell.alignment = ALIGN_CENTER
            cell.border = THIN_BORDER

        for row_index, (start_time, end_time) in enumerate(slots, start=2):
            for col_index, day in enumerate(days, start=2):
                cell = ws.cell(row=row_index, column=col_index)
                cell.font = FONT_CELL
                cell.alignment = ALIGN_CENTER
                cell.border = THIN_BORDER
                period = by_key.get((day.value, start_time, end_time))
                if period is None:
                    continue
                if period.has_warning:
                    cell.fill = FILL_WARNING
                elif not period.is_lesson:
                    cell.fill = FILL_NON_LESSON
            time_cell = ws.cell(row=row_index, column=1)
            time_cell.font = FONT_CELL
            time_cell.alignment = ALIGN_CENTER
            time_cell.border = THIN_BORDER

    def _export_periods_sheet(self, preview: GenerationPreview, writer: pd.ExcelWriter) -> None:
        df = pd.DataFrame(period_rows(preview.periods))
        df.to_excel(writer, sheet_name="Periods", index=False)

    def _export_loads_sheet(self, preview: GenerationPreview, writer: pd.ExcelWriter) -> None:
        rows = [
            {
                "Teacher": a.teacher_name,
                "Unit": a.unit_name,
                "Periods": a.period_count,
                "Total Load": a.total_load,
                "Status": a.status.value,
            }
            for a in preview.analysis.teacher_assignments
        ]
        columns = ["Teacher", "Unit", "Periods", "Total Load", "Status"]
        pd.DataFrame(rows, columns=columns).to_excel(
            writer, sheet_name="Teacher Loads", index=False
        )

    def _export_summary_sheet(self, preview: GenerationPreview, writer: pd.ExcelWriter) -> None:
        analysis = preview.analysis
        rows = [
            {"Metric": "Generation Date", "Value": preview.generation_date},
            {"Metric": "Category", "Value": preview.category or ""},
            {"Metric": "Lesson Periods", "Value": analysis.total_periods},
            {"Metric": "With Teacher", "Value": analysis.assigned_with_teacher},
            {"Metric": "Without Teacher", "Value": analysis.unassigned_teacher},
            {"Metric": "Free Periods", "Value": analysis.free_periods},
            {"Metric": "Units Used", "Value": analysis.units_used},
            {"Metric": "Teachers Involved", "Value": analysis.teachers_involved},
        ]
        pd.DataFrame(rows).to_excel(writer, sheet_name="Summary", index=False)

    def _export_warnings_sheet(self, preview: GenerationPreview, writer: pd.ExcelWriter) -> None:
        rows = [{"Warning": warning} for warning in preview.analysis.warnings]
        df = pd.DataFrame(rows) if rows else pd.DataFrame(columns=["Warning"])
        df.to_excel(writer, sheet_name="Warnings", index=False)


def get_exporter(format_type: str) -> BaseExporter:
    """Get appropriate exporter for format type.

    Args:
        format_type: Export format ('json', 'csv', 'excel')

    Returns:
        Exporter instance

    Raises:
        ValueError: If format type is not supported
    """
    exporters = {
        "json": JSONExporter,
        "csv": CSVExporter,
        "excel": ExcelExporter,
    }

    if format_type not in exporters:
        raise ValueError(
            f"Unsupported format: {format_type}. Supported: {', '.join(exporters.keys())}"
        )

    return exporters[format_type]()


def load_preview(input_path: Path | str) -> GenerationPreview:
    """Load a preview (periods and units) from a JSON file."""
    with open(input_path, encoding="utf-8") as f:
        return GenerationPreview.from_dict(json.load(f))
