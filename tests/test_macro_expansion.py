import pytest
from hypothesis import given, strategies as st

from zscheme.compiler import compile_source, parse_all
from zscheme.config import Settings
from zscheme.errors import SchemeSyntaxError
from zscheme.macros.expander import expand
from zscheme.macros.hygiene import FreshNames, base_name
from zscheme.macros.matcher import Repeated, match_pattern
from zscheme.macros.rules import compile_syntax_rules
from zscheme.reader.tokens import Integer
from zscheme.types.datum import Boolean, Identifier, List, Number
from zscheme.types.expression import Conditional, Quotation, SelfEvaluating


def num(n):
    return Number(Integer(n))


@pytest.fixture
def expand_with(datum):
    def _expand(rules, use):
        return expand(compile_syntax_rules(datum(rules)), datum(use), FreshNames()).datum

    return _expand


def test_pattern_variables_are_substituted(expand_with):
    assert expand_with("(syntax-rules () ((_ a b) (b a)))", "(m 1 f)") == List((Identifier("f"), num(1)))


def test_template_identifiers_are_renamed(datum):
    expansion = expand(
        compile_syntax_rules(datum("(syntax-rules () ((_ a) (list a a)))")), datum("(m 1)"), FreshNames()
    )
    assert expansion.datum == List((Identifier("list#1"), num(1), num(1)))
    assert expansion.aliases == {"list#1": "list"}


def test_keywords_in_templates_are_kept(expand_with):
    assert expand_with("(syntax-rules () ((_ c e) (if c e #f)))", "(m x 1)") == List(
        (Identifier("if"), Identifier("x"), num(1), Boolean(False))
    )


@given(st.lists(st.integers(-100, 100), max_size=8))
def test_ellipsis_matches_any_number_of_elements(values):
    rules = compile_syntax_rules(parse_all("(syntax-rules () ((_ x ...) (list x ...)))")[0])
    args = tuple(num(v) for v in values)
    result = expand(rules, List((Identifier("m"),) + args), FreshNames()).datum
    assert base_name(result.items[0].name) == "list"
    assert result.items[1:] == args


def test_ellipsis_with_suffix(expand_with):
    rules = "(syntax-rules () ((_ a ... z) (z a ...)))"
    assert expand_with(rules, "(m 1 2 3)") == List((num(3), num(1), num(2)))
    assert expand_with(rules, "(m 1)") == List((num(1),))


def test_literals_must_match_exactly(expand_with):
    rules = "(syntax-rules (else) ((_ else e) e) ((_ c e) (if c e #f)))"
    assert expand_with(rules, "(m else 1)") == num(1)
    assert expand_with(rules, "(m x 1)") == List((Identifier("if"), Identifier("x"), num(1), Boolean(False)))


def test_matching_ellipsis_counts(expand_with):
    rules = "(syntax-rules () ((_ (a ...) (b ...)) ((a b) ...)))"
    assert expand_with(rules, "(m (1 2) (3 4))") == List((List((num(1), num(3))), List((num(2), num(4)))))
    with pytest.raises(SchemeSyntaxError):
        expand_with(rules, "(m (1 2) (3))")


def test_nested_ellipsis(expand_with):
    rules = "(syntax-rules () ((_ (a b ...) ...) ((b ... a) ...)))"
    assert expand_with(rules, "(m (1 2 3) (4))") == List((List((num(2), num(3), num(1))), List((num(4),))))


def test_nested_ellipsis_bindings(datum):
    rules = compile_syntax_rules(datum("(syntax-rules () ((_ (a b ...) ...) ((a b ...) ...)))"))
    bindings = match_pattern(rules.rules[0].pattern, datum("((1 2 3) (4))"), rules.literals)
    assert bindings == {
        "a": Repeated((num(1), num(4))),
        "b": Repeated((Repeated((num(2), num(3))), Repeated())),
    }


def test_dotted_pattern(expand_with):
    rules = "(syntax-rules () ((_ a . rest) rest))"
    assert expand_with(rules, "(m 1 2 3)") == List((num(2), num(3)))
    assert expand_with(rules, "(m 1)") == List()


def test_vector_pattern(expand_with):
    assert expand_with("(syntax-rules () ((_ #(a ...)) (a ...)))", "(m #(1 2))") == List((num(1), num(2)))


def test_wildcard(expand_with):
    assert expand_with("(syntax-rules () ((_ _ b) b))", "(m 1 2)") == num(2)


def test_constant_pattern(expand_with):
    rules = "(syntax-rules () ((_ 0) zero) ((_ n) n))"
    assert expand_with(rules, "(m 0)") == Identifier("zero#1")
    assert expand_with(rules, "(m 5)") == num(5)


def test_quoted_pattern_matches_only_quote(expand_with):
    rules = "(syntax-rules () ((_ 'a) a) ((_ x) (other x)))"
    assert expand_with(rules, "(m 'z)") == Identifier("z")
    assert expand_with(rules, "(m (quote z))") == Identifier("z")
    assert expand_with(rules, "(m (f b))") == List(
        (Identifier("other#1"), List((Identifier("f"), Identifier("b"))))
    )


def test_rules_are_tried_in_order(expand_with):
    rules = "(syntax-rules () ((_ a) 1) ((_ a) 2))"
    assert expand_with(rules, "(m x)") == num(1)


def test_no_rule_matches(expand_with):
    with pytest.raises(SchemeSyntaxError) as exc:
        expand_with("(syntax-rules () ((_ a) a))", "(m)")
    assert "no syntax-rules pattern of 'm'" in str(exc.value)


@pytest.mark.parametrize(
    "rules",
    [
        "(syntax-rules () ((_ a a) a))",
        "(syntax-rules () ((_ a ...) a))",
        "(syntax-rules () ((_ ... a) a))",
        "(syntax-rules () ((_ a ... b ...) a))",
        "(syntax-rules () ((_ a . ...) a))",
        "(syntax-rules () ((_ a) (... a)))",
        "(syntax-rules () (_ 1))",
        "(syntax-rules () ((_ a)))",
        "(syntax-rules (...) ((_ a) a))",
        "(syntax-rules (1) ((_ a) a))",
        "(syntax-rules)",
        "(er-macro-transformer f)",
    ],
)
def test_invalid_transformers(datum, rules):
    with pytest.raises(SchemeSyntaxError):
        compile_syntax_rules(datum(rules))


def test_recursive_macro():
    forms = compile_source(
        """
        (define-syntax my-or
          (syntax-rules ()
            ((_) #f)
            ((_ e) e)
            ((_ e r ...) (if e e (my-or r ...)))))
        (my-or 1 2)
        """
    ).forms
    assert forms[1] == Conditional(
        SelfEvaluating(num(1)), SelfEvaluating(num(1)), SelfEvaluating(num(2))
    )


def test_macro_defined_in_a_body():
    [form] = compile_source(
        """
        (lambda (x)
          (define-syntax twice (syntax-rules () ((_ e) (begin e e))))
          (twice x))
        """
    ).forms
    x = form.arguments.variables[0]
    assert len(form.body.definitions) == 1
    assert form.body.commands == (x,)
    assert form.body.return_expression == x


def test_macro_may_expand_into_a_definition():
    forms = compile_source(
        """
        (define-syntax def (syntax-rules () ((_ n v) (define n v))))
        (def y 1)
        y
        """
    ).forms
    assert forms[1].variable.name == "y"
    assert forms[2] == forms[1].variable


def test_quoted_template_data_keep_source_names():
    forms = compile_source("(define-syntax q (syntax-rules () ((_) 'sym))) (q)").forms
    assert forms[1] == Quotation(Identifier("sym"))


def test_expansion_limit():
    with pytest.raises(SchemeSyntaxError) as exc:
        compile_source("(define-syntax loop (syntax-rules () ((_) (loop)))) (loop)", settings=Settings(max_expansions=10))
    assert "more than 10 macro expansions" in str(exc.value)


@pytest.mark.parametrize("uses,limit", [(50, 5), (1001, 1000)])
def test_independent_macro_uses_do_not_share_the_limit(uses, limit):
    body = " ".join(["(id 1)"] * uses)
    forms = compile_source(
        f"(define-syntax id (syntax-rules () ((_ x) x))) (define (f) {body})",
        settings=Settings(max_expansions=limit),
    ).forms
    body = forms[1].expression.body
    assert len(body.commands) == uses - 1
    assert body.return_expression == SelfEvaluating(num(1))


def test_chained_expansions_of_one_form_are_limited():
    source = """
    (define-syntax a (syntax-rules () ((_) (b))))
    (define-syntax b (syntax-rules () ((_) (c))))
    (define-syntax c (syntax-rules () ((_) 1)))
    (a)
    """
    assert compile_source(source, settings=Settings(max_expansions=3)).forms[-1] == SelfEvaluating(num(1))
    with pytest.raises(SchemeSyntaxError):
        compile_source(source, settings=Settings(max_expansions=2))


def test_nested_runaway_expansion():
    with pytest.raises(SchemeSyntaxError) as exc:
        compile_source("(define-syntax grow (syntax-rules () ((_) (f (grow))))) (grow)")
    assert "nests too deeply" in str(exc.value)
