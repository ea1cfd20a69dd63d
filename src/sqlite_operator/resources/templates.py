"""Jinja2 rendering for the text documents shipped to the pod."""

import jinja2

_environment = jinja2.Environment(
    loader=jinja2.PackageLoader("sqlite_operator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=jinja2.StrictUndefined,
    autoescape=False,
)


def render_template(template_name, **context):
    """Render a packaged template with the given context."""
    template = _environment.get_template(template_name)
    return template.render(**context)
