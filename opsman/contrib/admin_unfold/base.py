"""
Base classes for Unfold admin in Opsman.

Provides BaseModelAdmin with sensible defaults for textarea fields and
numeric formatting.
"""

from decimal import Decimal

from django import forms
from django.contrib.admin.widgets import AdminTextareaWidget
from unfold.admin import ModelAdmin
from unfold.widgets import UnfoldAdminTextareaWidget

TEXTAREA_WIDGETS = (forms.Textarea, AdminTextareaWidget, UnfoldAdminTextareaWidget)


def format_quantity(value: Decimal, decimal_places: int = 2) -> str:
    """
    Format a quantity value.

    Returns:
        Formatted string (e.g., "10.50"), "-" for None
    """
    if value is None:
        return "-"
    return f"{value:.{decimal_places}f}"


def format_date(d) -> str:
    """Format date as YYYY-MM-DD."""
    if d:
        return d.strftime('%Y-%m-%d')
    return '-'


def compact_textarea(widget) -> None:
    """Halve the height of a textarea and cap its width at 42rem."""
    style = [
        s for s in widget.attrs.get("style", "").split(";")
        if s.strip() and "height" not in s.lower() and "width" not in s.lower()
    ]
    style.append("height: 50%; max-height: 50%")
    style.append("width: 100%; max-width: 42rem")
    widget.attrs["style"] = "; ".join(s.strip() for s in style)

    try:
        widget.attrs["rows"] = max(1, int(widget.attrs.get("rows", 4)) // 2)
    except (ValueError, TypeError):
        widget.attrs["rows"] = 2


class BaseModelAdmin(ModelAdmin):
    """
    ModelAdmin base with sensible defaults.

    Notes, metadata (JSONField) and other textareas are compacted so they
    line up with the other form fields.
    """

    compressed_fields = True
    warn_unsaved_form = True

    def get_form(self, request, obj=None, **kwargs):
        form = super().get_form(request, obj, **kwargs)

        for field in form.base_fields.values():
            if isinstance(field.widget, TEXTAREA_WIDGETS):
                compact_textarea(field.widget)

        return form
