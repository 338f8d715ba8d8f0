"""Inline Variable refactoring: replace the references to a variable with its value."""

import logging
from typing import List

from jsmolt.core.ast_utils import parse_source
from jsmolt.core.editor import Editor, ErrorReason, Modification
from jsmolt.core.refactoring_base import RefactoringBase
from jsmolt.refactorings.composing_methods.find_inlinable_code import (
    find_inlinable_code_in_ast,
)

logger = logging.getLogger(__name__)


class InlineVariable(RefactoringBase):
    """Inline the variable, destructured binding or type alias at the selection.

    The declaration is removed once every reference is replaced, unless it's
    exported: then the references are still replaced and the user is told the
    declaration stays.
    """

    def apply(self, editor: Editor) -> None:
        tree = parse_source(editor.code, editor.language)
        inlinable_code = find_inlinable_code_in_ast(tree.root_node, self.selection)

        if inlinable_code is None:
            editor.show_error(ErrorReason.DID_NOT_FIND_INLINABLE_CODE)
            return

        if inlinable_code.is_redeclared:
            editor.show_error(ErrorReason.CANT_INLINE_REDECLARED_VARIABLES)
            return

        if not inlinable_code.has_identifiers_to_update:
            editor.show_error(ErrorReason.DID_NOT_FIND_INLINABLE_CODE)
            return

        is_exported = inlinable_code.is_exported

        def get_modifications(inlined_code: str) -> List[Modification]:
            modifications = inlinable_code.update_identifiers_with(inlined_code)
            if not is_exported:
                modifications.append(Modification("", inlinable_code.code_to_remove_selection))
            return modifications

        editor.read_then_write(inlinable_code.value_selection, get_modifications)
        logger.debug("Inlined variable at %s", self.selection.start)

        if is_exported:
            editor.show_error(ErrorReason.CANT_REMOVE_EXPORTED_VARIABLE)
