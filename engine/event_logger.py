"""
Checkpoint logger for game runs.

Writes every published GameState as one JSON line so a run can be
inspected after the fact or resumed from its last completed day
(see GameRunner.resume).
"""

import json
from pathlib import Path
from typing import TextIO

from engine.state import GameState


class CheckpointLogger:
    """
    Logs GameState snapshots to JSONL.

    Usage:
        logger = CheckpointLogger(Path("runs/seed_abc/checkpoints.jsonl"))
        stream.add_listener(logger.log_state)
        ...
        logger.close()
    """

    def __init__(self, output_path: Path):
        """
        Initialize the checkpoint logger.

        Args:
            output_path: Path to write the JSONL file (truncated on open)
        """
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._file: TextIO | None = None
        self._open()

    def _open(self) -> None:
        """Open the output file for writing."""
        self._file = open(self.output_path, "w")

    def log_state(self, state: GameState) -> None:
        """Append one snapshot and flush so a crash never loses a completed day."""
        if self._file is None:
            return
        self._file.write(json.dumps(state.to_dict()) + "\n")
        self._file.flush()

    def close(self) -> None:
        """Close the output file."""
        if self._file:
            self._file.close()
            self._file = None

    def __enter__(self) -> "CheckpointLogger":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def load_checkpoints(log_path: Path) -> list[dict[str, object]]:
    """
    Load raw snapshots from a JSONL file.

    Args:
        log_path: Path to the JSONL file

    Returns:
        List of snapshot dictionaries, oldest first
    """
    snapshots = []
    with open(log_path) as f:
        for line in f:
            if line.strip():
                snapshots.append(json.loads(line))
    return snapshots


def load_last_state(log_path: Path) -> GameState:
    """
    Restore the most recent GameState from a checkpoint file.

    Raises:
        ValueError: If the file holds no snapshots
    """
    snapshots = load_checkpoints(log_path)
    if not snapshots:
        raise ValueError(f"No checkpoints in {log_path}")
    return GameState.from_dict(snapshots[-1])
