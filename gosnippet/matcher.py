"""Match symbol references against a declaration index."""

from __future__ import annotations

from .errors import SymbolNotFoundError
from .index import DeclarationIndex
from .models import Declaration, SymbolRef
from .symbols import format_symbol


def resolve(ref: SymbolRef, idx: DeclarationIndex) -> Declaration:
    """Find the declaration *ref* names in *idx*.

    Functions and methods are probed first, with receiver type and pointer-ness
    both required to match exactly. A free-form ref that misses there is then
    looked up as a type, so ``pkg.Name`` serves for both functions and types.

    Raises:
        SymbolNotFoundError: nothing matched.
    """
    decl = idx.lookup_function(ref.member_name, ref.receiver_type, ref.is_pointer_receiver)
    if decl is not None:
        return decl
    if not ref.is_method:
        decl = idx.lookup_type(ref.member_name)
        if decl is not None:
            return decl
    raise SymbolNotFoundError(format_symbol(ref))
