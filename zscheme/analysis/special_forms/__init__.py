"""Registry of special forms for the AST builder.

Maps each reserved keyword to the handler that builds its Expression. The
builder consults this table before treating a list as a macro use or a
procedure call.
"""

from zscheme.analysis.special_forms.begin_form import begin_form
from zscheme.analysis.special_forms.define_form import define_form
from zscheme.analysis.special_forms.if_form import if_form
from zscheme.analysis.special_forms.lambda_form import lambda_form
from zscheme.analysis.special_forms.quote_form import quote_form
from zscheme.analysis.special_forms.set_form import set_form
from zscheme.analysis.special_forms.syntax_forms import (
    define_syntax_form,
    let_syntax_form,
    letrec_syntax_form,
    syntax_rules_form,
)

SPECIAL_FORMS = {
    "quote": quote_form,
    "lambda": lambda_form,
    "if": if_form,
    "set!": set_form,
    "begin": begin_form,
    "define": define_form,
    "define-syntax": define_syntax_form,
    "let-syntax": let_syntax_form,
    "letrec-syntax": letrec_syntax_form,
    "syntax-rules": syntax_rules_form,
}
