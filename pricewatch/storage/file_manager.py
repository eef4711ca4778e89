# pricewatch/storage/file_manager.py

"""Writes run snapshots (JSON / CSV) to the output directory."""

import csv
import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from pricewatch.config.settings import Settings
from pricewatch.models.snapshot import RunSnapshot

logger = logging.getLogger("pricewatch.storage")


def write_json_atomic(path: Path, data: object) -> None:
    """Dump *data* to a temp file beside *path*, then swap it in.

    Readers see either the previous file or the complete new one.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent,
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class FileManager:
    """Handles saving run snapshots to disk."""

    def __init__(self, output_dir: Path | None = None) -> None:
        self.output_dir: Path = output_dir or Settings.OUTPUT_DIR
        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("FileManager initialised, output_dir=%s", self.output_dir)

    @property
    def snapshot_path(self) -> Path:
        return self.output_dir / Settings.SNAPSHOT_FILENAME

    @property
    def history_path(self) -> Path:
        return self.output_dir / Settings.HISTORY_FILENAME

    def save_snapshot(self, snapshot: RunSnapshot) -> Path:
        """Replace the snapshot file with this run's results."""
        path = self.snapshot_path
        write_json_atomic(path, snapshot.to_dict())
        logger.info(
            "Saved snapshot of %d products to %s",
            len(snapshot.products),
            path,
        )
        return path

    def export_csv(self, snapshot: RunSnapshot) -> Path:
        """Export one row per product, cheapest first, unpriced last."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.output_dir / f"export_{timestamp}.csv"

        rows = sorted(
            snapshot.products,
            key=lambda p: (p.best is None, p.best.price if p.best else 0),
        )

        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(
                ["ID", "Name", "Best Price", "Store", "URL", "Error"]
            )
            for p in rows:
                writer.writerow([
                    p.id,
                    p.name,
                    f"{p.best.price:.2f}" if p.best else "",
                    p.best.store if p.best else "",
                    p.best.url if p.best else "",
                    p.error or "",
                ])

        logger.info(
            "Exported %d products to %s", len(snapshot.products), filepath,
        )
        return filepath
