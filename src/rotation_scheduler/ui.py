"""
User Interface for Rotation Scheduler

CustomTkinter-based GUI with worker management, start-date selection,
a 30-day schedule view, statistics and export.
"""

import customtkinter as ctk
from tkinter import messagebox, filedialog
from datetime import datetime, date
from typing import Callable, Dict, List, Optional
import logging

from .data_manager import WorkerRegistry, Worker, DataManagerError, ShiftType
from .scheduler_logic import (
    ShiftScheduler, ScheduleResult, MIN_WORKERS, SCHEDULING_RULES, group_entries_by_date
)
from .reporting import ExportManager, format_long_date

logger = logging.getLogger(__name__)


# Configure CustomTkinter
ctk.set_appearance_mode("light")
ctk.set_default_color_theme("blue")

SHIFT_COLORS = {
    ShiftType.MORNING: ("#fde68a", "black"),
    ShiftType.EVENING: ("#f97316", "white"),
    ShiftType.NIGHT: ("#1e3a8a", "white"),
    ShiftType.LEAVE: ("#bbf7d0", "black"),
}


class WorkerList(ctk.CTkFrame):
    """Add/remove panel for the registered workers"""

    def __init__(self, parent, registry: WorkerRegistry, on_workers_changed: Callable = None):
        super().__init__(parent)
        self.registry = registry
        self.on_workers_changed = on_workers_changed

        self._create_widgets()
        self._load_workers()

    def _create_widgets(self):
        title_label = ctk.CTkLabel(
            self,
            text="Worker Management",
            font=ctk.CTkFont(size=16, weight="bold")
        )
        title_label.pack(anchor="w", padx=10, pady=(10, 5))

        entry_frame = ctk.CTkFrame(self)
        entry_frame.pack(fill="x", padx=10, pady=5)

        self.name_entry = ctk.CTkEntry(entry_frame, placeholder_text="Enter worker name")
        self.name_entry.pack(side="left", fill="x", expand=True, padx=(5, 5), pady=5)
        self.name_entry.bind("<Return>", lambda e: self._add_worker())

        ctk.CTkButton(
            entry_frame,
            text="+",
            width=40,
            command=self._add_worker
        ).pack(side="right", padx=5, pady=5)

        self.count_label = ctk.CTkLabel(self, text="", text_color="gray")
        self.count_label.pack(anchor="w", padx=10)

        self.list_frame = ctk.CTkScrollableFrame(self, height=300)
        self.list_frame.pack(fill="both", expand=True, padx=10, pady=10)

    def _load_workers(self):
        """Load and display workers"""
        for widget in self.list_frame.winfo_children():
            widget.destroy()

        workers = self.registry.get_workers()
        self.count_label.configure(text=f"Team Members ({len(workers)})")

        if not workers:
            ctk.CTkLabel(
                self.list_frame,
                text="No workers added yet\nAdd workers to start creating schedules",
                text_color="gray"
            ).pack(pady=30)
            return

        for worker in workers:
            self._create_worker_item(worker)

    def _create_worker_item(self, worker: Worker):
        item_frame = ctk.CTkFrame(self.list_frame)
        item_frame.pack(fill="x", padx=5, pady=2)

        ctk.CTkLabel(
            item_frame,
            text=worker.name,
            font=ctk.CTkFont(weight="bold")
        ).pack(side="left", padx=10, pady=5)

        ctk.CTkButton(
            item_frame,
            text="Remove",
            width=70,
            height=25,
            fg_color="red",
            command=lambda: self._remove_worker(worker)
        ).pack(side="right", padx=5, pady=5)

    def _add_worker(self):
        try:
            worker = self.registry.add_worker(self.name_entry.get())
        except DataManagerError as e:
            messagebox.showerror("Error", str(e))
            return

        self.name_entry.delete(0, "end")
        self._load_workers()
        self._notify_change(f"{worker.name} has been added to the team")

    def _remove_worker(self, worker: Worker):
        if self.registry.remove_worker(worker.id):
            self._load_workers()
            self._notify_change(f"{worker.name} has been removed from the team")
        else:
            logger.error(f"Failed to remove worker {worker.name}")
            messagebox.showerror("Error", "Failed to remove worker")

    def _notify_change(self, message: str):
        if self.on_workers_changed:
            self.on_workers_changed(message)

    def refresh(self):
        self._load_workers()


class StatisticsPanel(ctk.CTkFrame):
    """Headline figures for the current session"""

    def __init__(self, parent, registry: WorkerRegistry):
        super().__init__(parent)
        self.registry = registry
        self.value_labels: Dict[str, ctk.CTkLabel] = {}

        self._create_widgets()

    def _create_widgets(self):
        ctk.CTkLabel(
            self,
            text="Statistics",
            font=ctk.CTkFont(size=16, weight="bold")
        ).pack(anchor="w", padx=10, pady=(10, 5))

        for key, label in (("total_workers", "Total Workers"),
                           ("schedule_entries", "Schedule Entries"),
                           ("period_days", "Month Period")):
            row = ctk.CTkFrame(self)
            row.pack(fill="x", padx=10, pady=2)
            ctk.CTkLabel(row, text=label, text_color="gray").pack(side="left", padx=5)
            value_label = ctk.CTkLabel(row, text="", font=ctk.CTkFont(weight="bold"))
            value_label.pack(side="right", padx=5)
            self.value_labels[key] = value_label

    def update_statistics(self):
        team_stats = self.registry.get_team_stats()
        self.value_labels["total_workers"].configure(text=str(team_stats["total_workers"]))
        self.value_labels["schedule_entries"].configure(text=str(team_stats["schedule_entries"]))
        self.value_labels["period_days"].configure(text=f"{team_stats['period_days']} Days")


class ScheduleView(ctk.CTkScrollableFrame):
    """Day-by-day view of the held schedule"""

    def __init__(self, parent, registry: WorkerRegistry):
        super().__init__(parent)
        self.registry = registry
        self.update_schedule_display()

    def update_schedule_display(self):
        for widget in self.winfo_children():
            widget.destroy()

        start_date = self.registry.start_date
        end_date = self.registry.get_end_date()

        if not self.registry.has_schedule():
            ctk.CTkLabel(
                self,
                text="No schedule generated yet",
                font=ctk.CTkFont(size=16)
            ).pack(pady=(60, 5))
            ctk.CTkLabel(
                self,
                text="Add workers and generate a schedule to see the preview",
                text_color="gray"
            ).pack()
            return

        ctk.CTkLabel(
            self,
            text=f"{format_long_date(start_date)} - {format_long_date(end_date)}",
            text_color="gray"
        ).pack(anchor="w", padx=10, pady=(5, 10))

        grouped = group_entries_by_date(self.registry.get_schedule(), start_date, end_date)
        for day, groups in grouped.items():
            self._create_day_card(day, groups)

    def _create_day_card(self, day: date, groups: Dict[ShiftType, List[str]]):
        card = ctk.CTkFrame(self)
        card.pack(fill="x", padx=10, pady=4)

        ctk.CTkLabel(
            card,
            text=f"{day.strftime('%A')}  {day.strftime('%b')} {day.day}",
            font=ctk.CTkFont(weight="bold")
        ).grid(row=0, column=0, columnspan=4, sticky="w", padx=10, pady=(5, 2))

        for column, shift in enumerate(ShiftType):
            card.grid_columnconfigure(column, weight=1)
            ctk.CTkLabel(card, text=shift.label, font=ctk.CTkFont(size=11)).grid(
                row=1, column=column, sticky="w", padx=10
            )

            names = groups[shift]
            if not names:
                ctk.CTkLabel(card, text="No assignments", text_color="gray",
                             font=ctk.CTkFont(size=10)).grid(row=2, column=column, sticky="w", padx=10, pady=(0, 5))
                continue

            fg_color, text_color = SHIFT_COLORS[shift]
            names_frame = ctk.CTkFrame(card, fg_color="transparent")
            names_frame.grid(row=2, column=column, sticky="w", padx=10, pady=(0, 5))
            for name in names:
                ctk.CTkLabel(
                    names_frame,
                    text=name,
                    fg_color=fg_color,
                    text_color=text_color,
                    corner_radius=6,
                    font=ctk.CTkFont(size=10)
                ).pack(anchor="w", pady=1)


class RulesPanel(ctk.CTkFrame):
    """Static description of the rotation rules"""

    def __init__(self, parent):
        super().__init__(parent)
        ctk.CTkLabel(
            self,
            text="Scheduling Rules",
            font=ctk.CTkFont(size=16, weight="bold")
        ).pack(anchor="w", padx=10, pady=(10, 5))

        for heading, rules in SCHEDULING_RULES.items():
            ctk.CTkLabel(self, text=heading, font=ctk.CTkFont(weight="bold")).pack(anchor="w", padx=10)
            text = "\n".join(f"• {rule}" for rule in rules)
            ctk.CTkLabel(self, text=text, justify="left", text_color="gray").pack(anchor="w", padx=20, pady=(0, 5))


class MainWindow(ctk.CTk):
    """Main application window"""

    def __init__(self, registry: WorkerRegistry, scheduler: ShiftScheduler,
                 export_manager: Optional[ExportManager] = None):
        super().__init__()

        self.title("Shift Scheduler Pro")
        self.geometry("1400x900")

        self.registry = registry
        self.scheduler = scheduler
        self.export_manager = export_manager or ExportManager(registry)

        self._create_widgets()
        self._refresh_views()
        self.status_var.set("Ready")

    def _create_widgets(self):
        # Top control panel
        control_frame = ctk.CTkFrame(self, height=80)
        control_frame.pack(fill="x", padx=10, pady=10)
        control_frame.pack_propagate(False)

        ctk.CTkLabel(control_frame, text="Month Starting:").pack(side="left", padx=10)

        self.start_date_var = ctk.StringVar(value=self.registry.start_date.strftime("%Y-%m-%d"))
        start_entry = ctk.CTkEntry(control_frame, textvariable=self.start_date_var, width=120)
        start_entry.pack(side="left", padx=5)
        start_entry.bind("<Return>", lambda e: self._on_start_date_change())

        ctk.CTkButton(
            control_frame,
            text="Set",
            command=self._on_start_date_change,
            width=50
        ).pack(side="left", padx=5)

        self.window_label = ctk.CTkLabel(control_frame, text="", text_color="gray")
        self.window_label.pack(side="left", padx=10)

        self.export_button = ctk.CTkButton(
            control_frame,
            text="Export",
            command=self._export_schedule,
            width=100
        )
        self.export_button.pack(side="right", padx=10)

        self.generate_button = ctk.CTkButton(
            control_frame,
            text="Generate Schedule",
            command=self._generate_schedule,
            width=150
        )
        self.generate_button.pack(side="right", padx=10)

        # Main content area
        content_frame = ctk.CTkFrame(self)
        content_frame.pack(fill="both", expand=True, padx=10, pady=(0, 10))

        sidebar = ctk.CTkFrame(content_frame, width=350)
        sidebar.pack(side="left", fill="y", padx=(0, 5))

        self.statistics_panel = StatisticsPanel(sidebar, self.registry)
        self.statistics_panel.pack(fill="x", pady=(0, 5))

        self.worker_list = WorkerList(sidebar, self.registry, on_workers_changed=self._on_workers_changed)
        self.worker_list.pack(fill="both", expand=True, pady=5)

        RulesPanel(sidebar).pack(fill="x", pady=(5, 0))

        self.schedule_view = ScheduleView(content_frame, self.registry)
        self.schedule_view.pack(side="right", fill="both", expand=True, padx=(5, 0))

        # Status bar
        self.status_var = ctk.StringVar(value="")
        status_bar = ctk.CTkLabel(self, textvariable=self.status_var)
        status_bar.pack(side="bottom", fill="x", padx=10, pady=5)

    def _refresh_views(self):
        """Sync every panel with the registry"""
        self.window_label.configure(
            text=f"30 days: {format_long_date(self.registry.start_date)} - "
                 f"{format_long_date(self.registry.get_end_date())}"
        )
        self.statistics_panel.update_statistics()
        self.schedule_view.update_schedule_display()

        enough_workers = len(self.registry.get_workers()) >= MIN_WORKERS
        self.generate_button.configure(state="normal" if enough_workers else "disabled")
        self.export_button.configure(state="normal" if self.registry.has_schedule() else "disabled")

    def _on_workers_changed(self, message: str):
        self._refresh_views()
        self.status_var.set(message)

    def _on_start_date_change(self):
        """Apply the start date typed by the user"""
        value = self.start_date_var.get().strip()
        try:
            new_date = datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError:
            messagebox.showerror("Invalid Date", f"'{value}' is not a valid date (YYYY-MM-DD)")
            self.start_date_var.set(self.registry.start_date.strftime("%Y-%m-%d"))
            return

        self.registry.set_start_date(new_date)
        logger.info(f"Start date set to {new_date}")
        self._refresh_views()
        self.status_var.set(f"Start date set to {format_long_date(new_date)}")

    def _generate_schedule(self):
        """Generate a new rotation for the current workers and start date"""
        if len(self.registry.get_workers()) < MIN_WORKERS:
            messagebox.showwarning(
                "Insufficient Workers",
                f"You need at least {MIN_WORKERS} workers to generate a schedule"
            )
            return

        self.status_var.set("Generating...")
        self.update()

        result = self.scheduler.generate_schedule()
        self._update_after_generation(result)

    def _update_after_generation(self, result: ScheduleResult):
        self._refresh_views()

        if result.success:
            self.status_var.set(f"Schedule generated: {len(result.entries)} entries")
            messagebox.showinfo("Schedule Generated", result.message)
        else:
            self.status_var.set(f"Generation failed: {result.message}")
            messagebox.showerror("Error", result.message)

    def _export_schedule(self):
        """Export current schedule to PDF, Excel, or CSV."""
        if not self.registry.has_schedule():
            messagebox.showerror("No Schedule", "Please generate a schedule first")
            return

        try:
            output_path = filedialog.asksaveasfilename(
                initialfile=self.export_manager.get_default_filename("pdf"),
                defaultextension=".pdf",
                filetypes=[
                    ("PDF files", "*.pdf"),
                    ("Excel files", "*.xlsx"),
                    ("CSV files", "*.csv"),
                    ("All files", "*.*")
                ],
                title="Export Schedule"
            )

            if not output_path:
                return  # User cancelled

            format_type = self.export_manager.format_for_path(output_path)
            success = self.export_manager.export_schedule(format_type, output_path)

            if success:
                self.status_var.set(f"Schedule exported to {output_path}")
                messagebox.showinfo("Export Successful", f"Schedule exported successfully to:\n{output_path}")
            else:
                messagebox.showerror("Export Failed", "Failed to export schedule. Please try again.")

        except Exception as e:
            logger.error(f"Export error: {e}", exc_info=True)
            messagebox.showerror("Export Error", f"An error occurred during export:\n{str(e)}")
