"""
Costline Command Line Interface (CLI)
=====================================

Interactive terminal program:

    costline --data data/disaster_costs.csv
    python -m costline.cli --data data/disaster_costs.xlsx --verbose

The dataset is loaded once. Commands toggle categories on the legend filter,
inspect what is currently shown, and write the chart / a DOCX report.
The data file is never modified.
"""

from __future__ import annotations
import argparse
import logging
import os
import shlex

from .dataset import EventDataset
from .engine import Frame, TimelineEngine
from .loader import load_events

HELP = """
Costline commands
-----------------

1) View / Inspect
   help
   stats
   legend                           (categories, counts, selected marker)
   show [n]                         (first n visible events, default 10)
   labels                           (costliest-of-year labels currently drawn)
   tooltip <key>                    (example: tooltip 12)

2) Filtering (legend clicks)
   toggle <category>                (example: toggle flooding)
   clear                            (empty selection = show all)

3) Output
   render "<out.png>"               (png, svg or pdf)
   report "<out.docx>"
   interactive                      (window: click legend, hover marks)

4) Exit
   quit
"""

# commands that do not change or export the view are not logged
_QUIET = ("help", "stats", "legend", "show", "labels", "tooltip", "quit", "exit")


def main(argv=None):
    """Entry point for the Costline CLI.

    1) Load + validate dataset
    2) Build the timeline engine
    3) Start an interactive REPL
    """
    ap = argparse.ArgumentParser(prog="costline")
    ap.add_argument("--data", required=True, help="Path to disaster cost table (.csv or .xlsx)")
    ap.add_argument("--verbose", action="store_true", help="Log engine activity")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print("Loading dataset...")
    dataset = EventDataset.build(load_events(args.data))
    engine = TimelineEngine(dataset)
    session = Session(engine=engine, data_path=args.data)

    print(f"Loaded {len(dataset)} events over {len(dataset.years)} years. Type 'help' for commands.")
    while True:
        try:
            line = input("costline> ")
        except EOFError:
            break
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.lower() in ("quit", "exit"):
            break
        try:
            session.handle(stripped)
        except Exception as e:
            print(f"Error: {e}")


class Session:
    """One REPL session: the engine, the last frame and a command log."""

    def __init__(self, engine: TimelineEngine, data_path: str = ""):
        self.engine = engine
        self.data_path = data_path
        self.command_log = []
        self.frame: Frame = engine.render()

    def handle(self, line: str) -> None:
        """Handle one command line and print the result."""
        parts = shlex.split(line)
        cmd = parts[0].lower()
        if cmd not in _QUIET:
            self.command_log.append(line)

        if cmd == "help":
            print(HELP)
            return

        if cmd == "stats":
            ds = self.engine.dataset
            lo, hi = ds.magnitude_range
            print(f"Events: {len(ds)} | shown: {len(self.frame.marks)} | labels: {len(self.frame.labels)}")
            print(f"Years: {min(ds.years)}-{ds.max_year()} | cost range: {lo:g}-{hi:g} billion")
            print(f"Selected: {', '.join(sorted(self.frame.selected)) or '(none: showing all)'}")
            return

        if cmd == "legend":
            for e in self.frame.legend:
                mark = "[x]" if e.selected else "[ ]"
                print(f"{mark} {e.category:<20} {e.label or '-':<24} {e.count}")
            return

        if cmd == "toggle":
            if len(parts) < 2:
                raise ValueError("usage: toggle <category>")
            category = parts[1]
            if category not in self.engine.dataset.category_counts:
                raise ValueError(f"no events with category {category!r}; see 'legend'")
            self.frame = self.engine.toggle_category(category)
            state = "selected" if category in self.frame.selected else "deselected"
            print(f"{category} {state}. Showing {len(self.frame.marks)} events.")
            return

        if cmd == "clear":
            self.frame = self.engine.clear_filter()
            print(f"Filter cleared. Showing {len(self.frame.marks)} events.")
            return

        if cmd == "show":
            n = int(parts[1]) if len(parts) >= 2 else 10
            for m in self.frame.marks[:n]:
                print(f"[{m.key}] {m.name} | {m.category} | {m.magnitude:g}B | x={m.x:.1f} y={m.y:.1f} r={m.radius:.1f}")
            return

        if cmd == "labels":
            if not self.frame.labels:
                print("No labels (costliest events of the shown years are filtered out).")
            for lb in self.frame.labels:
                print(f"[{lb.key}] {lb.text} at x={lb.x:.1f} y={lb.y:.1f}")
            return

        if cmd == "tooltip":
            if len(parts) < 2:
                raise ValueError("usage: tooltip <key>")
            tip = self.engine.hover(int(parts[1]))
            print(" | ".join(tip.lines()))
            return

        if cmd == "render":
            from .draw import draw_frame
            path = parts[1] if len(parts) >= 2 else "timeline.png"
            draw_frame(self.frame, self.engine.config, path)
            print(f"Chart written to {path}")
            return

        if cmd == "report":
            from .report import DatasetCitation, ReportConfig, generate_docx_report
            path = parts[1] if len(parts) >= 2 else "costline_report.docx"
            cfg = ReportConfig(
                citation=DatasetCitation(file_name=os.path.basename(self.data_path) or None),
                command_log=self.command_log,
            )
            generate_docx_report(self.engine, path, config=cfg)
            print(f"Report written to {path}")
            return

        if cmd == "interactive":
            from .draw import show_interactive
            show_interactive(self.engine)
            self.frame = self.engine.render()
            return

        print("Unknown command. Type 'help'.")


if __name__ == "__main__":
    main()
