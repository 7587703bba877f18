"""
Purchases App - hire purchase sales and their payments.

A purchase is a CASH, LAYAWAY or CREDIT sale of shop stock to a customer.
Balances fall as payments are confirmed; collector payments wait for a
shop admin to confirm or reject them.

Architecture:
- Models: Purchase, PurchaseItem, Payment
- Services: sales, pricing, payments, lifecycle, spreadsheets
- Views: shop-scoped ViewSets plus business-level workbook endpoints
- Commands: refresh_purchase_statuses (overdue marking)
"""
