"""
Base Format Adapter - Abstract base class for the serialization formats.

An adapter parses raw input (bytes or text) into a canonical model and
serializes a model back to bytes. Tabular formats (delimited text,
properties) produce a TabularModel, structured formats (XML, JSON, YAML)
produce a TreeModel.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Tuple, Union

from ..core.model import TabularModel, TreeModel
from ..utils.file_reader import decode_bytes
from ..exceptions import EncodingError

logger = logging.getLogger(__name__)

Model = Union[TabularModel, TreeModel]
Source = Union[bytes, str]


class ModelKind(Enum):
    """Shape of the model an adapter works with."""
    TABULAR = "tabular"
    TREE = "tree"


class FormatAdapter(ABC):
    """
    Abstract base class for format adapters.

    Subclasses declare their format name, file extensions and model kind,
    and implement parse() / serialize().

    Usage:
        adapter = AdapterFactory.create("json")
        model = adapter.parse(b'{"a": 1}')
        raw = adapter.serialize(model)
    """

    format_name: str = ""
    extensions: Tuple[str, ...] = ()
    model_kind: ModelKind = ModelKind.TABULAR

    def __init__(self, encoding: Optional[str] = None):
        """
        Initialize the adapter.

        Args:
            encoding: Encoding of raw input and output. Input is decoded
                strictly with it when given and detected otherwise; output
                uses StoreSettings.encoding when None.
        """
        self.encoding = encoding

    @property
    def output_encoding(self) -> str:
        if self.encoding:
            return self.encoding
        from ..config.store_settings import get_store_settings
        return get_store_settings().encoding

    @property
    def is_tabular(self) -> bool:
        return self.model_kind is ModelKind.TABULAR

    def decode(self, source: Source) -> str:
        """
        Decode raw input to text.

        Raises:
            EncodingError: If the bytes cannot be decoded
        """
        return decode_bytes(source, self.encoding)

    def encode(self, text: str) -> bytes:
        try:
            return text.encode(self.output_encoding)
        except (UnicodeEncodeError, LookupError) as e:
            raise EncodingError(f"Cannot encode content as {self.output_encoding}: {e}") from e

    @abstractmethod
    def parse(self, source: Source) -> Model:
        """
        Parse raw input into a model.

        Raises:
            ParseError: On malformed syntax
            EncodingError: On undecodable bytes
        """
        pass

    @abstractmethod
    def serialize(self, model: Model) -> bytes:
        """Serialize a model to raw output."""
        pass

    def empty_model(self) -> Model:
        """A new empty model of the adapter's kind."""
        return TabularModel() if self.is_tabular else TreeModel()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(encoding={self.encoding!r})"
