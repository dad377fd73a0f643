from mondo.builders.aggregate import Aggregate
from mondo.builders.bulk import Bulk
from mondo.builders.distinct import Distinct
from mondo.builders.find_and_modify import FindAndModify, FindDelete, FindReplace, FindUpdate
from mondo.builders.options import Operation, OptionSet, RequestOptions
from mondo.builders.query import Query
from mondo.builders.sorting import parse_sort, sort_field
from mondo.builders.watch import Watcher


__all__ = [
    "Aggregate",
    "Bulk",
    "Distinct",
    "FindAndModify",
    "FindDelete",
    "FindReplace",
    "FindUpdate",
    "Operation",
    "OptionSet",
    "Query",
    "RequestOptions",
    "Watcher",
    "parse_sort",
    "sort_field",
]
