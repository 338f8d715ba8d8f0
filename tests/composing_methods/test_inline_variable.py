"""Tests for Inline Variable refactoring.

Tests for the Inline Variable refactoring, which replaces the references to a
variable with its value and removes the declaration.
"""

import pytest

from jsmolt.core.ast_utils import node_text, parse_source, walk
from jsmolt.core.editor import ErrorReason
from jsmolt.core.selection import Selection
from jsmolt.refactorings.composing_methods.inline_variable import InlineVariable
from tests.conftest import RefactoringTestBase, run_refactoring


class TestInlineVariable(RefactoringTestBase):
    """Tests for Inline Variable refactoring."""

    fixture_category = "composing_methods/inline_variable"

    def test_simple(self) -> None:
        """Test inlining a constant used in several places.

        Every reference is replaced with the value and the declaration line
        is removed entirely.
        """
        self.refactor("inline-variable", target="L1:7")

    def test_multiple_declarations(self) -> None:
        """Test inlining the last declarator of a multiple declaration.

        Only the selected declarator is removed, along with the comma before it.
        """
        self.refactor("inline-variable", target="L1:28")

    def test_object_pattern(self) -> None:
        """Test inlining a destructured property reads it from the initializer."""
        self.refactor("inline-variable", target="L1:9")

    def test_object_pattern_with_rest(self) -> None:
        """Test that a property is kept in the pattern when a rest element follows.

        Removing it would make the rest element capture it.
        """
        self.refactor("inline-variable", target="L1:9")

    def test_nested_object_pattern(self) -> None:
        """Test inlining a property nested in another destructured property."""
        self.refactor("inline-variable", target="L1:20")

    def test_array_pattern(self) -> None:
        """Test inlining a destructured element reads it by index."""
        self.refactor("inline-variable", target="L1:15")

    def test_unary_and_shorthand(self) -> None:
        """Test that unary operands are parenthesized and shorthand keys expanded."""
        self.refactor("inline-variable", target="L1:7")

    def test_shadowed(self) -> None:
        """Test that occurrences bound to other declarations are left alone.

        Both a parameter and a local constant of an inner function shadow the
        inlined variable.
        """
        self.refactor("inline-variable", target="L1:7")

    def test_type_alias(self) -> None:
        """Test inlining a TypeScript type alias into its type references."""
        self.refactor("inline-variable", target="L1:6")

    def test_exported(self) -> None:
        """Test that an exported variable is inlined but its declaration kept."""
        self.refactor("inline-variable", target="L1:7")

    def test_nested_scope(self) -> None:
        """Test inlining a variable declared in a function body."""
        self.refactor("inline-variable", target="L2:9")

    def test_redeclared_variable_raises_error(self) -> None:
        """Test that a variable assigned again can't be inlined."""
        test_file = self.tmp_path / "input.ts"
        test_file.write_text("let count = 0;\ncount = 1;\nconsole.log(count);\n")

        from jsmolt.cli import refactor_file

        with pytest.raises(ValueError, match="redeclared"):
            refactor_file("inline-variable", test_file, target="L1:5")
        assert test_file.read_text() == "let count = 0;\ncount = 1;\nconsole.log(count);\n"

    def test_missing_target_raises_error(self) -> None:
        """Test that the target parameter is required."""
        test_file = self.tmp_path / "input.ts"
        test_file.write_text("const a = 1;\n")

        from jsmolt.cli import refactor_file

        with pytest.raises(ValueError, match="Missing required parameters"):
            refactor_file("inline-variable", test_file)


class TestInlineVariableErrors:
    """Tests for the errors Inline Variable reports instead of refactoring."""

    @pytest.mark.parametrize(
        "code",
        [
            "let count = 0;\ncount = 1;\nconsole.log(count);",
            "let count = 0;\ncount += 1;\nconsole.log(count);",
            "let count = 0;\ncount++;\nconsole.log(count);",
            "let a = 0, b = 1;\n[a, b] = [b, a];\nconsole.log(a);",
            "let count = 0;\nfor (count of [1, 2]) {}\nconsole.log(count);",
            "let count = 0;\nfor (count in config) {}\nconsole.log(count);",
            "var count = 0;\nif (ready) {\n  var count = 1;\n}\nconsole.log(count);",
        ],
    )
    def test_redeclared_variable(self, code: str) -> None:
        """Test that assignments and updates to the variable prevent inlining."""
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 4)), code)

        assert editor.errors == [ErrorReason.CANT_INLINE_REDECLARED_VARIABLES]
        assert editor.code == code

    def test_shadowed_assignment_is_not_a_redeclaration(self) -> None:
        """Test that assigning a shadowing variable doesn't prevent inlining."""
        code = "const count = 0;\nfunction reset(count) {\n  count = 1;\n}\nconsole.log(count);"
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 6)), code)

        assert editor.errors == []
        assert editor.code == "function reset(count) {\n  count = 1;\n}\nconsole.log(0);"

    @pytest.mark.parametrize(
        "code, selection",
        [
            ('console.log("Hello");', Selection.cursor_at(0, 2)),
            ("const unused = 1;\nconsole.log(2);", Selection.cursor_at(0, 7)),
            ("let value;\nconsole.log(value);", Selection.cursor_at(0, 5)),
            ("const { name } = getUser();\nconsole.log(name);", Selection.cursor_at(0, 9)),
            ("type Pair<T> = [T, T];\nlet pair: Pair<number>;", Selection.cursor_at(0, 6)),
        ],
    )
    def test_did_not_find_inlinable_code(self, code: str, selection: Selection) -> None:
        """Test selections without inlinable code, or without references to it."""
        editor = run_refactoring(InlineVariable(selection), code)

        assert editor.errors == [ErrorReason.DID_NOT_FIND_INLINABLE_CODE]
        assert editor.code == code

    def test_exported_variable_shows_notice(self) -> None:
        """Test that an exported declaration is kept and the user told so."""
        code = "export const limit = 10;\nconsole.log(limit);"
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 14)), code)

        assert editor.errors == [ErrorReason.CANT_REMOVE_EXPORTED_VARIABLE]
        assert editor.code == "export const limit = 10;\nconsole.log(10);"

    def test_variable_read_by_typeof_is_kept(self) -> None:
        """Test a declaration a type query still reads is kept once inlined."""
        code = "const limit = 10;\ntype Limit = typeof limit;\nconsole.log(limit);"
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 7)), code)

        assert editor.errors == []
        assert editor.code == "const limit = 10;\ntype Limit = typeof limit;\nconsole.log(10);"

    def test_default_export_is_kept(self) -> None:
        """Test that a variable exported by default is kept."""
        code = "const limit = 10;\nconsole.log(limit);\nexport default limit;"
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 7)), code)

        assert editor.errors == [ErrorReason.CANT_REMOVE_EXPORTED_VARIABLE]
        assert editor.code == "const limit = 10;\nconsole.log(10);\nexport default limit;"


class TestInlineVariableDestructuring:
    """Tests for inlining destructured bindings."""

    def test_first_property_removes_following_delimiter(self) -> None:
        """Test removing a property that has a next sibling."""
        code = "const { name, age } = user;\nconsole.log(name);"
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 8)), code)

        assert editor.code == "const { age } = user;\nconsole.log(user.name);"

    def test_last_property_removes_previous_delimiter(self) -> None:
        """Test removing a property that has only a previous sibling."""
        code = "const { name, age } = user;\nconsole.log(age);"
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 14)), code)

        assert editor.code == "const { name } = user;\nconsole.log(user.age);"

    def test_renamed_property(self) -> None:
        """Test inlining a property bound to another name."""
        code = "const { name: userName } = user;\nconsole.log(userName);"
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 16)), code)

        assert editor.code == "console.log(user.name);"

    def test_string_key(self) -> None:
        """Test inlining a property with a string key reads it with brackets."""
        code = 'const { "first-name": first } = user;\nconsole.log(first);'
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 23)), code)

        assert editor.code == 'console.log(user["first-name"]);'

    def test_member_expression_initializer(self) -> None:
        """Test inlining a property destructured from a member expression."""
        code = "const { city } = this.address;\nconsole.log(city);"
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 8)), code)

        assert editor.code == "console.log(this.address.city);"

    def test_object_in_array_pattern(self) -> None:
        """Test that accessors compose from the outermost pattern inwards."""
        code = "const [{ name }] = users;\nconsole.log(name);"
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 9)), code)

        assert editor.code == "console.log(users[0].name);"

    def test_array_element_followed_by_others_leaves_hole(self) -> None:
        """Test that removing an element keeps the index of the following ones."""
        code = "const [first, second] = names;\nconsole.log(first, second);"
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 7)), code)

        assert editor.code == "const [, second] = names;\nconsole.log(names[0], second);"

    def test_declarator_among_others(self) -> None:
        """Test removing a destructured declarator among other declarators."""
        code = "const a = 1, { name } = user;\nconsole.log(a, name);"
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 15)), code)

        assert editor.code == "const a = 1;\nconsole.log(a, user.name);"


class TestInlineVariableParentheses:
    """Tests for keeping the precedence of inlined expressions."""

    @pytest.mark.parametrize(
        "code, expected",
        [
            ("const total = a + b;\nconsole.log(total * 2);", "console.log((a + b) * 2);"),
            ("const total = a + b;\nconsole.log(total);", "console.log(a + b);"),
            ("const total = a + b;\nconst label = `${total}`;", "const label = `${a + b}`;"),
            (
                "const options = { debug: true };\nconst get = () => options;",
                "const get = () => ({ debug: true });",
            ),
            (
                "const count = items.length;\nconsole.log(count * 2);",
                "console.log(items.length * 2);",
            ),
        ],
    )
    def test_compound_values(self, code: str, expected: str) -> None:
        """Test compound values are parenthesized where operators surround them."""
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 7)), code)

        assert editor.code == expected

    def test_declaration_first_on_its_line(self) -> None:
        """Test the spaces after a declaration sharing its line are removed with it."""
        code = "const a = 1; console.log(a);"
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 6)), code)

        assert editor.code == "console.log(1);"

    def test_declaration_sharing_its_line(self) -> None:
        """Test no space is left where a declaration sharing its line was."""
        code = "x = 1;\nconst a = 1; console.log(a);"
        editor = run_refactoring(InlineVariable(Selection.cursor_at(1, 6)), code)

        assert editor.code == "x = 1;\nconsole.log(1);"


class TestInlineTypeAlias:
    """Tests for inlining type aliases."""

    def test_inner_declarations_are_left_alone(self) -> None:
        """Test a type alias of the same name in a function keeps its own references."""
        code = "type A = string;\nlet v: A;\nfunction g() {\n  type A = number;\n  let w: A;\n}"
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 5)), code)

        assert editor.code == "let v: string;\nfunction g() {\n  type A = number;\n  let w: A;\n}"

    def test_type_parameters_are_left_alone(self) -> None:
        """Test a type parameter of the same name hides the alias."""
        code = "type A = string;\nlet v: A;\nfunction f<A>(x: A): A {\n  return x;\n}"
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 5)), code)

        assert editor.code == "let v: string;\nfunction f<A>(x: A): A {\n  return x;\n}"

    @pytest.mark.parametrize(
        "code, expected",
        [
            ("type A = string | number;\nlet v: A[];", "let v: (string | number)[];"),
            ("type A = string | number;\nlet v: A;", "let v: string | number;"),
            ("type A = string | number;\nlet v: A | boolean;", "let v: string | number | boolean;"),
            ("type A = () => void;\nlet v: A | null;", "let v: (() => void) | null;"),
            ("type A = { id: number };\nlet v: A[];", "let v: { id: number }[];"),
        ],
    )
    def test_compound_types(self, code: str, expected: str) -> None:
        """Test compound types are parenthesized where type operators surround them."""
        editor = run_refactoring(InlineVariable(Selection.cursor_at(0, 5)), code)

        assert editor.code == expected


class TestInliningTwice:
    """Tests for running Inline Variable again on its own output."""

    @pytest.mark.parametrize(
        "code, cursor, name",
        [
            ("const total = price * quantity;\nconsole.log(total, total);", (0, 6), "total"),
            ("const { name, age } = user;\nconsole.log(name);", (0, 8), "name"),
            ("const a = 1, b = 2;\nconsole.log(a + b);", (0, 13), "b"),
        ],
    )
    def test_nothing_left_to_inline(self, code: str, cursor: tuple, name: str) -> None:
        """Test the inlined binding is gone, so inlining again finds nothing."""
        first = run_refactoring(InlineVariable(Selection.cursor_at(*cursor)), code)
        second = run_refactoring(InlineVariable(Selection.cursor_at(*cursor)), first.code)

        names = [
            node_text(node)
            for node in walk(parse_source(first.code).root_node)
            if node.type in ("identifier", "shorthand_property_identifier_pattern")
        ]
        assert first.errors == []
        assert name not in names
        assert second.errors == [ErrorReason.DID_NOT_FIND_INLINABLE_CODE]
        assert second.code == first.code
