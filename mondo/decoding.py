from typing import Any, Callable, Mapping, Type

from mondo.errors import DecodeError


type Decoder[T] = Type[T] | Callable[..., T]


def decode[T](document: Mapping[str, Any], into: Decoder[T] | None = None) -> T | Mapping[str, Any]:
    """Materializes a raw document into the requested type.

    With no target the document is returned as is. Types that define a `from_document` classmethod are handed the
    whole document, anything else (dataclasses, pydantic models, plain callables) is called with the document's
    fields as keyword arguments.

    Raises:
        DecodeError: If the target rejects the document.
    """
    if into is None:
        return document

    try:
        if from_document := getattr(into, "from_document", None):
            return from_document(document)

        return into(**document)

    except (TypeError, ValueError, KeyError) as e:
        name = getattr(into, "__name__", repr(into))
        raise DecodeError(f"Failed to decode document into {name}: {e}") from e


def decode_all[T](documents: list[Mapping[str, Any]], into: Decoder[T] | None = None) -> list[T | Mapping[str, Any]]:
    return [decode(document, into) for document in documents]
