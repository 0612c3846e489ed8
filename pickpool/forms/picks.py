from flask import current_app
from flask_wtf import FlaskForm
from wtforms import IntegerField, StringField
from wtforms.validators import DataRequired, InputRequired, Length, ValidationError


class SubmitPicksForm(FlaskForm):
    """Submission API payload; accepts form fields or a JSON body"""

    class Meta:
        csrf = False

    username = StringField("Username", validators=[DataRequired(), Length(max=64)])
    week = IntegerField("Week", validators=[InputRequired()])
    picks = StringField("Picks", validators=[DataRequired()])

    def validate_week(self, field):
        max_week = current_app.config.get("MAX_WEEK", 18)
        if field.data is None or not 1 <= field.data <= max_week:
            raise ValidationError(f"Week must be between 1 and {max_week}")

    def error_message(self):
        """First error of each invalid field, joined for the response message"""
        return "; ".join(
            f"{getattr(self, name).label.text}: {errors[0]}"
            for name, errors in self.errors.items()
        )
