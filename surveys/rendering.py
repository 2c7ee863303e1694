"""
Serializers for a compiled ``RenderedForm``: HTML block, inline CSS and the
standalone embed script. All three are rendered through Django templates under
``surveys/embed/`` so markup is autoescaped.
"""
import json

from django.core.serializers.json import DjangoJSONEncoder
from django.template.loader import render_to_string
from django.utils.safestring import mark_safe

from surveys.compiler import RenderedForm

# Keeps the embedded literals from closing a surrounding <script> element
_JS_ESCAPES = {
    ord('<'): '\\u003C',
    ord('>'): '\\u003E',
    ord('&'): '\\u0026',
    ord('\u2028'): '\\u2028',
    ord('\u2029'): '\\u2029',
}


def js_literal(value):
    return mark_safe(json.dumps(value, cls=DjangoJSONEncoder).translate(_JS_ESCAPES))


def render_block(form: RenderedForm) -> str:
    return render_to_string('surveys/embed/block.html', {
        'form': form,
        'container_id': form.container_id,
    }).strip()


def render_styles(form: RenderedForm) -> str:
    theme = form.theme_tokens
    return render_to_string('surveys/embed/styles.css', {
        'container_id': form.container_id,
        'theme': theme,
        'custom_css': mark_safe(theme.get('customCSS', '')),
    }).strip()


def build_embed_script(form: RenderedForm) -> str:
    config = {
        'surveyId': form.survey_id,
        'containerId': form.container_id,
        'submitUrl': form.submit.url,
        'questions': [
            {'id': q.id, 'multiSelect': q.multi_select, 'position': q.position}
            for q in form.questions
        ],
        'labels': {
            'submit': form.submit.label,
            'submitting': form.submit.submitting_label,
            'error': form.submit.error_label,
            'success': form.submit.success_message,
        },
        'errorRevertMs': form.submit.error_revert_ms,
        'primaryColor': form.theme_tokens.get('primaryColor'),
    }
    return render_to_string('surveys/embed/survey.js', {
        'config': js_literal(config),
        'styles': js_literal(render_styles(form)),
        'markup': js_literal(render_block(form)),
    }).strip()
