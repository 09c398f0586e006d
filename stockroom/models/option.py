from enum import Enum
from tortoise import fields, models


class OptionType(str, Enum):
    CATEGORY = "CATEGORY"
    AGE = "AGE"
    SUBCATEGORY = "SUBCATEGORY"  # Scoped to a CATEGORY option


# Child type -> the type its parentId must point at
PARENT_TYPES = {
    OptionType.SUBCATEGORY: OptionType.CATEGORY,
}


class Option(models.Model):
    id = fields.IntField(primary_key=True)
    type = fields.CharEnumField(OptionType, max_length=20)
    value = fields.TextField()
    parent_id = fields.IntField(null=True, source_field="parentId")

    class Meta:
        table = "options"
