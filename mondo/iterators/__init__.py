from mondo.iterators.base import StickyIterator
from mondo.iterators.cursor import Cursor
from mondo.iterators.stream import ChangeEvent, Namespace, OperationType, Stream


__all__ = ["StickyIterator", "Cursor", "Stream", "ChangeEvent", "Namespace", "OperationType"]
