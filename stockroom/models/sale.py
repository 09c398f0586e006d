from tortoise import fields, models


class SaleRecord(models.Model):
    """
    Append-only ledger entry. `item_id` is a plain column rather than a foreign
    key: deleting an item leaves its sales in place, and the display fields
    copied at sale time keep them readable.
    """
    id = fields.IntField(primary_key=True)
    item_id = fields.IntField(source_field="itemId", db_index=True)
    quantity = fields.IntField()
    price = fields.DecimalField(max_digits=12, decimal_places=2)
    total = fields.DecimalField(max_digits=14, decimal_places=2)
    date = fields.DatetimeField()

    # Snapshot of the item at sale time
    category = fields.TextField(null=True)
    sub_category = fields.TextField(null=True, source_field="subCategory")
    color = fields.TextField(null=True)

    class Meta:
        table = "sales"
