"""initial stock ledger schema

Revision ID: 5c1e0a7d2b43
Revises:
Create Date: 2026-10-17 09:12:40.118204
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e0a7d2b43"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "Department",
        sa.Column("DeptID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("Name", sa.String(200), nullable=False),
        sa.Column("IsITDepartment", sa.Boolean(), nullable=False, server_default=sa.text("0")),
    )

    op.create_table(
        "Product",
        sa.Column("ProductID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("SKU", sa.String(100), nullable=False),
        sa.Column("SupplierBarcode", sa.String(100)),
        sa.Column("ManufacturerItemName", sa.String(200), nullable=False),
        sa.Column("InternalItemName", sa.String(200)),
        sa.Column("Category", sa.String(50)),
        sa.Column("CurrentStock", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("MinThreshold", sa.Integer(), nullable=False, server_default=sa.text("10")),
        sa.UniqueConstraint("SKU", name="UQ_Product_SKU"),
        sa.CheckConstraint("CurrentStock >= 0", name="CK_Product_CurrentStock_NonNeg"),
        sa.CheckConstraint("MinThreshold >= 0", name="CK_Product_MinThreshold_NonNeg"),
    )
    op.create_index("IX_Product_SupplierBarcode", "Product", ["SupplierBarcode"], unique=False)

    op.create_table(
        "PurchaseRequest",
        sa.Column("RequestID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("RequestQr", sa.String(64), nullable=False),
        sa.Column("RequestedBy", sa.String(100)),
        sa.Column("RequestDate", sa.DateTime(), nullable=False),
        sa.Column("Status_s", sa.String(20), nullable=False, server_default=sa.text("'Pending'")),
        sa.Column("Notes", sa.String(1000)),
        sa.UniqueConstraint("RequestQr", name="UQ_PurchaseRequest_RequestQr"),
        sa.CheckConstraint("Status_s IN ('Pending','Approved','Rejected','Received')", name="CK_PR_Status"),
    )

    op.create_table(
        "PurchaseRequestItem",
        sa.Column("ItemID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("RequestID", sa.Integer(), sa.ForeignKey("PurchaseRequest.RequestID"), nullable=False),
        sa.Column("ProductID", sa.Integer(), sa.ForeignKey("Product.ProductID")),
        sa.Column("RequestedQty", sa.Integer(), nullable=False),
        sa.Column("ExpectedDeliveryDate", sa.DateTime()),
        sa.Column("SupplierName", sa.String(200)),
        sa.Column("UnitPrice", sa.DECIMAL(10, 2)),
        sa.Column("Status_s", sa.String(20), nullable=False, server_default=sa.text("'Pending'")),
        sa.CheckConstraint("RequestedQty > 0", name="CK_PRI_Qty_Positive"),
        sa.CheckConstraint("Status_s IN ('Pending','Received')", name="CK_PRI_Status"),
    )
    op.create_index("IX_PurchaseRequestItem_RequestID", "PurchaseRequestItem", ["RequestID"], unique=False)
    op.create_index("IX_PurchaseRequestItem_ProductID", "PurchaseRequestItem", ["ProductID"], unique=False)

    op.create_table(
        "ReceivingTxn",
        sa.Column("ReceivingID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("ItemID", sa.Integer(), sa.ForeignKey("PurchaseRequestItem.ItemID"), nullable=False),
        sa.Column("ReceivedQty", sa.Integer(), nullable=False),
        sa.Column("ReceivedDate", sa.DateTime(), nullable=False),
        sa.Column("ReceivedBy", sa.String(100)),
        sa.Column("IsDamaged", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("DamageNotes", sa.String(1000)),
        sa.Column("PhotoUrl", sa.String(500)),
        sa.CheckConstraint("ReceivedQty > 0", name="CK_Receiving_Qty_Positive"),
    )
    op.create_index("IX_ReceivingTxn_ItemID", "ReceivingTxn", ["ItemID"], unique=False)

    op.create_table(
        "WarehouseTxn",
        sa.Column("TxnID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("ProductID", sa.Integer(), sa.ForeignKey("Product.ProductID"), nullable=False),
        sa.Column("DeptID", sa.Integer(), sa.ForeignKey("Department.DeptID")),
        sa.Column("UserID", sa.String(100)),
        sa.Column("TxnType", sa.String(3), nullable=False),
        sa.Column("Quantity", sa.Integer(), nullable=False),
        sa.Column("ReasonCode", sa.String(100)),
        sa.Column("TxnDate", sa.DateTime(), nullable=False),
        sa.Column("ReferenceRequestID", sa.Integer(), sa.ForeignKey("PurchaseRequest.RequestID")),
        sa.CheckConstraint("TxnType IN ('IN','OUT')", name="CK_WTxn_TxnType"),
        sa.CheckConstraint("Quantity > 0", name="CK_WTxn_Quantity_Positive"),
    )
    op.create_index("IX_WarehouseTxn_ProductID", "WarehouseTxn", ["ProductID"], unique=False)

    op.create_table(
        "TonerConsumption",
        sa.Column("ConsumptionID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("ProductID", sa.Integer(), sa.ForeignKey("Product.ProductID"), nullable=False),
        sa.Column("DeptID", sa.Integer(), sa.ForeignKey("Department.DeptID"), nullable=False),
        sa.Column("Quantity", sa.Integer(), nullable=False),
        sa.Column("ConsumptionDate", sa.DateTime(), nullable=False),
        sa.Column("RequestedBy", sa.String(100)),
        sa.Column("ApprovedBy", sa.String(100)),
        sa.Column("IsFlagged", sa.Boolean(), nullable=False, server_default=sa.text("0")),
    )
    op.create_index(
        "IX_TonerConsumption_Product_Dept_Date",
        "TonerConsumption",
        ["ProductID", "DeptID", "ConsumptionDate"],
        unique=False,
    )

    op.create_table(
        "AppUser",
        sa.Column("UserID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("FullName", sa.String(100), nullable=False),
        sa.Column("Email", sa.String(200), nullable=False),
        sa.Column("HashedPassword", sa.String(255), nullable=False),
        sa.Column("Role", sa.String(20), nullable=False, server_default=sa.text("'viewer'")),
        sa.Column("IsActive", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("LastLogin", sa.DateTime()),
        sa.Column("CreatedAt", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("Email", name="UQ_AppUser_Email"),
        sa.CheckConstraint("Role in ('viewer','store','admin')", name="CK_AppUser_Role"),
    )


def downgrade() -> None:
    op.drop_table("AppUser")
    op.drop_index("IX_TonerConsumption_Product_Dept_Date", table_name="TonerConsumption")
    op.drop_table("TonerConsumption")
    op.drop_index("IX_WarehouseTxn_ProductID", table_name="WarehouseTxn")
    op.drop_table("WarehouseTxn")
    op.drop_index("IX_ReceivingTxn_ItemID", table_name="ReceivingTxn")
    op.drop_table("ReceivingTxn")
    op.drop_index("IX_PurchaseRequestItem_ProductID", table_name="PurchaseRequestItem")
    op.drop_index("IX_PurchaseRequestItem_RequestID", table_name="PurchaseRequestItem")
    op.drop_table("PurchaseRequestItem")
    op.drop_table("PurchaseRequest")
    op.drop_index("IX_Product_SupplierBarcode", table_name="Product")
    op.drop_table("Product")
    op.drop_table("Department")
