"""Type oracle: interfaces plus the declaration-based implementation."""

from rxmigrate.oracle.declarations import DeclarationIndex, read_type, scan_file
from rxmigrate.oracle.models import (
    ClassDecl,
    FileDeclarations,
    TypeDescriptor,
    TypeOracle,
    TypeRef,
)
from rxmigrate.oracle.resolver import DeclarationOracle

__all__ = [
    "ClassDecl",
    "DeclarationIndex",
    "DeclarationOracle",
    "FileDeclarations",
    "TypeDescriptor",
    "TypeOracle",
    "TypeRef",
    "read_type",
    "scan_file",
]
