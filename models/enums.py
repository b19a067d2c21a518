"""Label/code codec for the two enumerated training unit fields."""

import logging

logger = logging.getLogger(__name__)


class EnumCodec:
    """Bidirectional mapping between small integer codes and display labels.

    Never raises: unknown codes render as ``Unknown (<code>)`` and
    unparseable labels degrade to ``default`` with a logged warning.
    """

    def __init__(self, field_name: str, labels: dict[int, str], default: int):
        self.field_name = field_name
        self.labels = dict(labels)
        self.default = default
        self._codes = {label: code for code, label in self.labels.items()}

    def label_of(self, code) -> str:
        if code in self.labels:
            return self.labels[code]
        return f"Unknown ({code})"

    def code_of(self, label) -> int:
        text = "" if label is None else str(label).strip()
        if text in self._codes:
            return self._codes[text]
        try:
            return int(text)
        except ValueError:
            logger.warning(
                f"{self.field_name}: unrecognised value '{text}', "
                f"using default {self.default} ({self.label_of(self.default)})"
            )
            return self.default


TRAINING_TYPE = EnumCodec(
    "Type",
    {1: "Course", 2: "Online Resource", 3: "Document", 6: "Face to Face"},
    default=1,
)

ASSESSMENT_METHOD = EnumCodec(
    "Assessment Method",
    {0: "None", 1: "Self Sign Off", 2: "Supervisor Sign Off"},
    default=0,
)
