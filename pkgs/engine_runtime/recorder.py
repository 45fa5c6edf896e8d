"""
Trajectory recording for the engine runtime.

StateRecorder collects one row per recorded geodesic step and writes them as CSV,
JSONL or Parquet. Four-vectors are split into one column per component so every
format stays flat.
"""
import csv
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import torch

from pkgs.tensor_core import Tensor

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("csv", "jsonl", "parquet")


def _clean(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, np.number)):
        return float(value)
    if isinstance(value, Tensor):
        value = value.to_numpy()
    if isinstance(value, torch.Tensor):
        value = value.detach().cpu().numpy()
    if isinstance(value, (list, tuple, np.ndarray)):
        arr = np.asarray(value, dtype=np.float64)
        return float(arr.item()) if arr.size == 1 else arr.reshape(-1).tolist()
    if value is None:
        return None
    return str(value)


class StateRecorder:
    """Row recorder with CSV, JSONL and Parquet output."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.rows: List[Dict[str, Any]] = []
        self._metadata = {
            'created_at': datetime.now(timezone.utc).isoformat(),
        }

    def set_metadata(self, **kwargs):
        self._metadata.update(kwargs)

    @property
    def metadata(self) -> Dict[str, Any]:
        return dict(self._metadata)

    def log(self, row: Dict[str, Any]):
        """Record one row; sequences are expanded into `<key>_<i>` columns."""
        if not self.enabled:
            return
        clean_row: Dict[str, Any] = {'timestamp': datetime.now(timezone.utc).isoformat()}
        for k, v in row.items():
            v = _clean(v)
            if isinstance(v, list):
                for i, x in enumerate(v):
                    clean_row[f"{k}_{i}"] = x
            else:
                clean_row[k] = v
        self.rows.append(clean_row)

    def record_state(self, step: int, state, **extra):
        """Record a ParticleState (position, velocity, proper time) plus extra columns."""
        self.log({
            'step': step,
            'proper_time': state.proper_time,
            'x': state.position,
            'u': state.velocity,
            **extra,
        })

    def _columns(self) -> List[str]:
        columns: Dict[str, None] = {}
        for row in self.rows:
            for k in row:
                columns.setdefault(k, None)
        return list(columns)

    def dump_csv(self, path: str):
        if not self.enabled or not self.rows:
            return
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=self._columns())
            writer.writeheader()
            writer.writerows(self.rows)
        logger.info(f"Saved {len(self.rows)} rows to CSV: {path}")

    def dump_jsonl(self, path: str):
        """First line holds the metadata, then one JSON object per row."""
        if not self.enabled or not self.rows:
            return
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, 'w') as f:
            f.write(json.dumps({'_metadata': self._metadata}) + '\n')
            for row in self.rows:
                f.write(json.dumps(row) + '\n')
        logger.info(f"Saved {len(self.rows)} rows to JSONL: {path}")

    def dump_parquet(self, path: str):
        if not self.enabled or not self.rows:
            return
        try:
            import pandas as pd
            import pyarrow as pa
            import pyarrow.parquet as pq
        except ImportError:
            logger.warning("pandas/pyarrow not available, skipping Parquet export")
            return

        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        df = pd.DataFrame(self.rows, columns=self._columns())
        table = pa.Table.from_pandas(df, preserve_index=False)
        table = table.replace_schema_metadata({'metadata': json.dumps(self._metadata)})
        pq.write_table(table, path)
        logger.info(f"Saved {len(df)} rows to Parquet: {path}")

    def dump(self, base_path: str, formats: Optional[Iterable[str]] = None) -> List[str]:
        """Write `<base_path>.<fmt>` for every requested format; returns the paths written."""
        formats = list(formats) if formats is not None else list(SUPPORTED_FORMATS)
        unknown = [fmt for fmt in formats if fmt not in SUPPORTED_FORMATS]
        if unknown:
            raise ValueError(f"Unsupported recording formats: {unknown}")
        base_dir = os.path.dirname(base_path)
        base_name = os.path.splitext(os.path.basename(base_path))[0]
        written = []
        for fmt in formats:
            path = os.path.join(base_dir, f"{base_name}.{fmt}")
            getattr(self, f"dump_{fmt}")(path)
            if os.path.exists(path):
                written.append(path)
        return written

    def clear(self):
        self.rows.clear()

    def get_summary(self) -> Dict[str, Any]:
        if not self.rows:
            return {'row_count': 0}

        summary = {
            'row_count': len(self.rows),
            'first_timestamp': self.rows[0].get('timestamp'),
            'last_timestamp': self.rows[-1].get('timestamp'),
            'columns': self._columns(),
        }

        numeric_stats = {}
        for col in summary['columns']:
            values = [row[col] for row in self.rows
                      if isinstance(row.get(col), float)]
            if values:
                numeric_stats[col] = {
                    'count': len(values),
                    'mean': float(np.mean(values)),
                    'std': float(np.std(values)),
                    'min': float(np.min(values)),
                    'max': float(np.max(values)),
                }
        summary['numeric_stats'] = numeric_stats
        return summary
