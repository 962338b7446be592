from sqlalchemy import Column, DateTime, Integer, MetaData, Numeric, String, Table

metadata = MetaData()

# Mirrors the existing "sales" table; the service never issues DDL against it.
# Column keys are the JSON field names, column names the quoted storage names.
sales = Table(
    "sales",
    metadata,
    Column("Order_ID", String(64), key="order_id", nullable=False, index=True),
    Column("Seller", String(255), key="seller"),
    Column("Article_Name", String(255), key="article_name"),
    Column("Category", String(255), key="category"),
    Column("Quantity", Integer, key="quantity"),
    Column("Total_Article_Price", Numeric(12, 2), key="total_article_price"),
    Column("Datetime", DateTime(timezone=True), key="datetime", nullable=False, index=True),
    Column("Seller_Category", String(255), key="seller_category"),
    Column("Buyer_NIPT", String(64), key="buyer_nipt"),
)
