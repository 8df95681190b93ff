"""Editor preferences model for FocusPad."""

from pydantic import BaseModel, ConfigDict, Field


class Preferences(BaseModel):
    """Editor preferences persisted as a JSON blob in local storage.

    Field aliases match the stored key names so blobs written by earlier
    versions of the editor keep loading.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    theme: str = Field(default="dark")
    editor_font: str = Field(default="Playpen Sans", alias="editorFont")
    editor_font_size: str = Field(default="18", alias="editorFontSize")
    auto_save: bool = Field(default=True, alias="autoSave")
