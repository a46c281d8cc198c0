{
    "name": "MyParcel Fulfillment",
    "summary": "Export sale orders to MyParcel: concepts, labels and track numbers",
    "version": "0.1.0",
    "license": "LGPL-3",
    "author": "Your Company",
    "website": "",
    "depends": ["sale_stock", "mail"],
    "external_dependencies": {"python": ["myparcel_export", "requests", "dateutil"]},
    "application": False,
    "data": [
        "security/ir.model.access.csv",
        "views/myparcel_export_wizard_views.xml",
    ],
    "description": """
    Sends confirmed sale orders to MyParcel in batches.
    Creates consignments, downloads the label PDF and writes the barcodes back on the delivery orders.
    """,
}
