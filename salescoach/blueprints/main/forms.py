from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileRequired
from wtforms import SubmitField


class UploadForm(FlaskForm):
    file = FileField("Call recording", validators=[FileRequired("Please choose an audio file.")],
                     render_kw={"accept": "audio/*"})
    submit = SubmitField("Upload & analyze")


class DemoForm(FlaskForm):
    submit = SubmitField("View Demo Analysis")


class ClearForm(FlaskForm):
    submit = SubmitField("Clear all data")
