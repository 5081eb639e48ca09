"""
Output slot binding.

Object detection graphs return a bag of tensors whose order is an accident
of the export. OutputBinding says which slot holds scores, boxes and
classes; a slot is either a position in the model's output list or an
output name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Sequence, Union

import numpy as np

from models.config import OutputSlotsConfig
from models.errors import InferenceError
from models.tensors import RawOutputSet

Slot = Union[int, str]


@dataclass(frozen=True)
class OutputBinding:
    """
    Maps model output slots to RawOutputSet fields.

    Defaults match the reference mask detector export, where boxes sit at
    position 7, scores at 1 and classes at 5.
    """
    scores: Slot = 1
    boxes: Slot = 7
    classes: Slot = 5

    @classmethod
    def from_config(cls, cfg: OutputSlotsConfig) -> "OutputBinding":
        return cls(
            scores=cfg.scores,
            boxes=cfg.boxes,
            classes=cfg.classes,
        )

    def bind(self, outputs: Union[Sequence[Any], Mapping[str, Any]]) -> RawOutputSet:
        """
        Build a RawOutputSet from positional (list) or named (dict) outputs.

        A named mapping can also be addressed by position, following its
        insertion order.

        Raises:
            InferenceError: If a slot is missing or the tensors have
                inconsistent shapes.
        """
        try:
            scores = np.asarray(self._pick(outputs, self.scores), dtype=np.float32)
            boxes = np.asarray(self._pick(outputs, self.boxes), dtype=np.float32)
            classes = np.asarray(self._pick(outputs, self.classes))
            return RawOutputSet(scores=scores, boxes=boxes, classes=classes)
        except (IndexError, KeyError, TypeError, ValueError) as e:
            raise InferenceError(f"Model outputs do not match binding {self}: {e}") from e

    @staticmethod
    def _pick(outputs: Union[Sequence[Any], Mapping[str, Any]], slot: Slot) -> Any:
        if isinstance(outputs, Mapping):
            if isinstance(slot, str):
                return outputs[slot]
            return list(outputs.values())[slot]
        if isinstance(slot, str):
            raise KeyError(f"named slot {slot!r} used with positional outputs")
        return outputs[slot]

    def to_dict(self) -> Dict[str, Any]:
        return {"scores": self.scores, "boxes": self.boxes, "classes": self.classes}
