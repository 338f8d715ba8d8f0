"""Inline whatever is declared at the selection: a function or a variable."""

from jsmolt.core.ast_utils import parse_source
from jsmolt.core.editor import Editor
from jsmolt.core.refactoring_base import RefactoringBase
from jsmolt.refactorings.composing_methods.inline_function import (
    InlineFunction,
    find_function_declaration,
)
from jsmolt.refactorings.composing_methods.inline_variable import InlineVariable


class InlineVariableOrFunction(RefactoringBase):
    """Inline the function whose header is selected, or the variable otherwise."""

    def apply(self, editor: Editor) -> None:
        tree = parse_source(editor.code, editor.language)
        if find_function_declaration(tree.root_node, self.selection) is not None:
            InlineFunction(self.selection).apply(editor)
        else:
            InlineVariable(self.selection).apply(editor)
