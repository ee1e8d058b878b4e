"""
Figure generator module for sleep bout analysis.

Creates matplotlib figures comparing cohorts:
- Line plot of binned bout counts (mean +/- SEM) per category
- Bar plot of binned bout counts (mean +/- SD) per category
- Dot plot of individual animals with cohort mean +/- SEM per category
- Bout count and average bout duration per ZT hour (mean +/- SEM)
- Total bouts per experimental day (mean +/- SEM)
"""

import numpy as np
from matplotlib.figure import Figure
from matplotlib.gridspec import GridSpec
from pathlib import Path
from typing import List, Tuple

from .analysis import AnalysisResult
from .phase import HOURS_PER_DAY
from .sleep_analysis import CATEGORIES, CATEGORY_LABELS


class FigureGenerator:
    """Generate matplotlib figures for cohort comparisons."""

    # Fixed colors for the two standard genotypes
    COHORT_COLORS = {
        'wild-type': '#3d6fe9',  # blue
        'mutant': '#e93d3d',     # red
    }

    # Fallback palette for other cohort labels
    PALETTE = [
        '#3daee9',  # light blue
        '#f0c040',  # yellow
        '#2ca02c',  # green
        '#9467bd',  # purple
        '#ff7f0e',  # orange
        '#e377c2',  # pink
        '#8c564b',  # brown
    ]

    # Dark theme colors
    BG_COLOR = '#2d2d2d'
    TEXT_COLOR = '#ffffff'
    GRID_COLOR = '#4d4d4d'
    DARK_PHASE_COLOR = '#1a1a1a'

    def __init__(self):
        pass

    def cohort_color(self, label: str, index: int) -> str:
        if label in self.COHORT_COLORS:
            return self.COHORT_COLORS[label]
        return self.PALETTE[index % len(self.PALETTE)]

    def generate_all_pages(self, result: AnalysisResult) -> List[Tuple[str, Figure]]:
        """
        Generate every figure for a run.

        Returns:
            List of (title, figure) tuples
        """
        pages = []

        for category in CATEGORIES:
            label = CATEGORY_LABELS[category]
            pages.append((f"{label} Bouts Line", self.create_line_plot(result, category)))
            pages.append((f"{label} Bouts Bar", self.create_bar_plot(result, category)))
            pages.append((f"{label} Bouts Dot", self.create_dot_plot(result, category)))

        pages.append(("ZT Hour Profile", self.create_zt_page(result)))

        if len(result.day_table) > 0:
            pages.append(("Daily Bouts", self.create_daily_page(result)))

        return pages

    def save_all(self, result: AnalysisResult, output_folder, save_pdf: bool = True) -> List[str]:
        """
        Save all figures as PNG files (plus one combined PDF).

        Args:
            result: Analysis results
            output_folder: Folder for the image files (created if needed)
            save_pdf: Also write all_figures.pdf

        Returns:
            List of saved file paths
        """
        folder = Path(output_folder)
        folder.mkdir(parents=True, exist_ok=True)

        pages = self.generate_all_pages(result)
        saved = []

        for title, fig in pages:
            png_path = folder / f"{title.replace(' ', '_')}.png"
            fig.savefig(str(png_path), facecolor=fig.get_facecolor(), edgecolor='none', dpi=150)
            saved.append(str(png_path))

        if save_pdf:
            from matplotlib.backends.backend_pdf import PdfPages

            pdf_path = folder / 'all_figures.pdf'
            with PdfPages(str(pdf_path)) as pdf:
                for title, fig in pages:
                    pdf.savefig(fig, facecolor=fig.get_facecolor(), edgecolor='none')
            saved.append(str(pdf_path))

        return saved

    def _new_figure(self, title: str, figsize=(8, 5)) -> Tuple[Figure, object]:
        fig = Figure(figsize=figsize, facecolor=self.BG_COLOR)
        ax = fig.add_subplot(111)
        ax.set_title(title, fontsize=12, color=self.TEXT_COLOR, fontweight='bold')
        self._style_axes(ax)
        return fig, ax

    def _style_axes(self, ax):
        ax.set_facecolor(self.BG_COLOR)
        ax.tick_params(colors=self.TEXT_COLOR, labelsize=8)
        ax.grid(True, alpha=0.3, color=self.GRID_COLOR)
        ax.spines['top'].set_visible(False)
        ax.spines['right'].set_visible(False)
        ax.spines['left'].set_color(self.GRID_COLOR)
        ax.spines['bottom'].set_color(self.GRID_COLOR)

    def _finish_bin_axes(self, ax, bin_labels: List[str]):
        x = np.arange(1, len(bin_labels) + 1)
        ax.set_xticks(x)
        ax.set_xticklabels(bin_labels, rotation=45, ha='right')
        ax.set_xlabel('Bout Duration', fontsize=9, color=self.TEXT_COLOR)
        ax.set_ylabel('Number of Bouts', fontsize=9, color=self.TEXT_COLOR)
        ax.set_ylim(bottom=0)

    def _legend(self, ax):
        handles, labels = ax.get_legend_handles_labels()
        if handles:
            ax.legend(loc='best', fontsize=8, facecolor=self.BG_COLOR,
                      edgecolor=self.GRID_COLOR, labelcolor=self.TEXT_COLOR)

    def create_line_plot(self, result: AnalysisResult, category: str) -> Figure:
        """Mean +/- SEM of binned bout counts, one line per cohort."""
        fig, ax = self._new_figure(f"{CATEGORY_LABELS[category]} Bout Durations")
        x = np.arange(1, len(result.bin_labels) + 1)

        for i, (label, summary) in enumerate(result.summaries.items()):
            stat = summary.bins[category]
            if stat.n == 0 or not np.all(np.isfinite(stat.mean)):
                continue
            color = self.cohort_color(label, i)
            ax.errorbar(x, stat.mean, yerr=stat.sem, color=color, linewidth=2, marker='o',
                        markerfacecolor=color, markersize=6, capsize=3,
                        label=f"{label} (Mean ± SEM, n={stat.n})")

        self._finish_bin_axes(ax, result.bin_labels)
        self._legend(ax)
        fig.tight_layout()
        return fig

    def create_bar_plot(self, result: AnalysisResult, category: str) -> Figure:
        """Grouped bars of mean binned bout counts with SD error bars."""
        fig, ax = self._new_figure(f"{CATEGORY_LABELS[category]} Bout Durations")
        x = np.arange(1, len(result.bin_labels) + 1)

        n_cohorts = max(1, len(result.summaries))
        width = 0.7 / n_cohorts

        for i, (label, summary) in enumerate(result.summaries.items()):
            stat = summary.bins[category]
            if stat.n == 0:
                continue
            offset = (i - (n_cohorts - 1) / 2) * width
            ax.bar(x + offset, stat.mean, width, color=self.cohort_color(label, i),
                   edgecolor='white', linewidth=0.5, label=f"{label} (Mean ± SD)")
            ax.errorbar(x + offset, stat.mean, yerr=stat.std, fmt='none',
                        ecolor=self.TEXT_COLOR, elinewidth=1, capsize=2)

        self._finish_bin_axes(ax, result.bin_labels)
        self._legend(ax)
        fig.tight_layout()
        return fig

    def create_dot_plot(self, result: AnalysisResult, category: str) -> Figure:
        """Individual animals as dots with the cohort mean +/- SEM."""
        fig, ax = self._new_figure(f"{CATEGORY_LABELS[category]} Bout Durations")
        x = np.arange(1, len(result.bin_labels) + 1)

        for i, (label, summary) in enumerate(result.summaries.items()):
            animals = result.animals_in(label)
            if not animals:
                continue
            color = self.cohort_color(label, i)
            x_shift = x + 0.2 * i

            for animal in animals:
                ax.scatter(x_shift, animal.bin_counts(category), s=30, color=color, alpha=0.3)

            stat = summary.bins[category]
            ax.errorbar(x_shift, stat.mean, yerr=stat.sem, color=color, linewidth=2,
                        marker='o', markerfacecolor=color, markersize=7, capsize=3,
                        label=f"{label} (Mean ± SEM)")

        self._finish_bin_axes(ax, result.bin_labels)
        self._legend(ax)
        fig.tight_layout()
        return fig

    def _shade_dark_phase(self, ax, result: AnalysisResult):
        """Shade ZT hours that fall in the dark phase."""
        config = result.config
        light_hours = (config.dark_start_hour - config.light_start_hour) % HOURS_PER_DAY
        ax.axvspan(light_hours - 0.5, HOURS_PER_DAY - 0.5, color=self.DARK_PHASE_COLOR,
                   alpha=0.6, zorder=0)

    def create_zt_page(self, result: AnalysisResult) -> Figure:
        """Bout count and average bout duration per ZT hour."""
        fig = Figure(figsize=(10, 8), facecolor=self.BG_COLOR)
        fig.suptitle("Sleep Bouts by Zeitgeber Time", fontsize=13, fontweight='bold',
                     color=self.TEXT_COLOR)

        gs = GridSpec(2, 1, figure=fig, hspace=0.35, left=0.09, right=0.97, top=0.9, bottom=0.08)
        ax_counts = fig.add_subplot(gs[0])
        ax_avg = fig.add_subplot(gs[1])
        zt = np.arange(HOURS_PER_DAY)

        for ax, attr, ylabel in ((ax_counts, 'counts', 'Bouts per Hour'),
                                 (ax_avg, 'average_duration', 'Mean Bout Duration (s)')):
            self._style_axes(ax)
            self._shade_dark_phase(ax, result)

            for i, (label, summary) in enumerate(result.summaries.items()):
                if summary.zt is None or summary.zt.n == 0:
                    continue
                triple = getattr(summary.zt, attr)
                color = self.cohort_color(label, i)
                ax.errorbar(zt, triple.mean, yerr=triple.sem, color=color, linewidth=1.5,
                            marker='o', markersize=4, capsize=2,
                            label=f"{label} (n={summary.zt.n})")

            ax.set_xticks(zt[::2])
            ax.set_xlim(-0.5, HOURS_PER_DAY - 0.5)
            ax.set_ylim(bottom=0)
            ax.set_ylabel(ylabel, fontsize=9, color=self.TEXT_COLOR)
            self._legend(ax)

        ax_avg.set_xlabel('ZT Hour', fontsize=9, color=self.TEXT_COLOR)
        return fig

    def create_daily_page(self, result: AnalysisResult) -> Figure:
        """Total bouts per experimental day, mean +/- SEM per cohort."""
        fig, ax = self._new_figure("Sleep Bouts per Experimental Day", figsize=(9, 5))
        days = result.day_table.day_indices

        for i, (label, summary) in enumerate(result.summaries.items()):
            means, sems, present = [], [], []
            for day_index in days:
                stats = summary.per_day.get(day_index)
                if not stats or stats['total_sleep'].n == 0:
                    continue
                present.append(day_index)
                means.append(stats['total_sleep'].mean)
                sems.append(stats['total_sleep'].sem)

            if present:
                color = self.cohort_color(label, i)
                ax.errorbar(present, means, yerr=sems, color=color, linewidth=2, marker='o',
                            markersize=6, capsize=3, label=f"{label} (Mean ± SEM)")

        ax.set_xticks(days)
        ax.set_xticklabels(result.day_table.labels(), rotation=30, ha='right', fontsize=7)
        ax.set_xlabel('Experimental Day', fontsize=9, color=self.TEXT_COLOR)
        ax.set_ylabel('Number of Bouts', fontsize=9, color=self.TEXT_COLOR)
        ax.set_ylim(bottom=0)
        self._legend(ax)
        fig.tight_layout()
        return fig
