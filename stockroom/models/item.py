from tortoise import fields, models


class StockItem(models.Model):
    """
    One inventory line. Column names keep the camelCase used by databases
    created before the Python port so those files open without a rebuild.
    """
    id = fields.IntField(primary_key=True)
    category = fields.TextField()
    # Free text by convention drawn from the SUBCATEGORY options of `category`
    sub_category = fields.TextField(null=True, source_field="subCategory")
    color = fields.TextField()
    age_group = fields.TextField(source_field="ageGroup")
    price = fields.DecimalField(max_digits=12, decimal_places=2, null=True, default=0)
    cost_price = fields.DecimalField(max_digits=12, decimal_places=2, null=True, default=0, source_field="costPrice")
    image_uri = fields.TextField(null=True, source_field="imageUri")
    quantity = fields.IntField()
    # Stamped by the item service on every write, never by the caller
    last_updated = fields.DatetimeField(source_field="lastUpdated")

    class Meta:
        table = "items"

    def __str__(self):
        return f"{self.category} / {self.color} / {self.age_group}"
