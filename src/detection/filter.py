"""
Confidence thresholding and class labeling.

Threshold and class catalog come in through an explicit FilterConfig, so
every filter instance (and every test) carries its own configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List

from models.catalog import ClassCatalog
from models.detection import Detection, Proposal


@dataclass(frozen=True)
class FilterConfig:
    """
    Attributes:
        threshold: Proposals must score strictly above this to be kept.
        catalog: Class table used to label kept proposals.
    """
    threshold: float
    catalog: ClassCatalog

    def __post_init__(self) -> None:
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"threshold must be between 0 and 1, got {self.threshold}")


class DetectionFilter:
    """Turns decoded proposals into labeled detections."""

    def __init__(self, config: FilterConfig):
        self.config = config

    def filter(self, proposals: Iterable[Proposal]) -> List[Detection]:
        """
        Keep proposals scoring above the threshold, in input order.

        Raises:
            UnknownClass: If a kept proposal's class id is outside the catalog.
        """
        threshold = self.config.threshold
        catalog = self.config.catalog

        detections: List[Detection] = []
        for proposal in proposals:
            if not proposal.score > threshold:
                continue
            entry = catalog.lookup(proposal.class_id)
            detections.append(
                Detection(
                    class_id=proposal.class_id,
                    label=entry.name,
                    color=entry.color,
                    score=proposal.score,
                    bbox=proposal.bbox,
                )
            )
            logging.debug(
                f"detection: class={entry.name} score={detections[-1].score_text} "
                f"bbox={proposal.bbox.as_tuple()}"
            )

        return detections
