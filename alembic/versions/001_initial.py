"""Initial tables: terms, classes, students, fees, payments, payroll, expenses

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # Academic terms
    op.create_table(
        "academic_terms",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("academic_year", sa.String(9), nullable=False),
        sa.Column("session", sa.String(50), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_current", sa.Boolean(), nullable=False, server_default="false"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("academic_year", "session", name="uq_academic_term_year_session"),
    )
    op.create_index("ix_academic_terms_academic_year", "academic_terms", ["academic_year"])
    op.create_index("ix_academic_terms_is_current", "academic_terms", ["is_current"])

    # Classes
    op.create_table(
        "school_classes",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
    )

    # Students
    op.create_table(
        "students",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("admission_id", sa.String(50), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(10), nullable=False),
        sa.Column("class_id", sa.BigInteger(), nullable=False),
        sa.Column("admission_year", sa.String(9), nullable=False),
        sa.Column("admission_term", sa.String(50), nullable=False),
        sa.Column("admission_date", sa.Date(), nullable=False),
        sa.Column("previous_school", sa.String(200), nullable=True),
        sa.Column("guardian_name", sa.String(200), nullable=False),
        sa.Column("guardian_phone", sa.String(20), nullable=False),
        sa.Column("guardian_email", sa.String(255), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["class_id"], ["school_classes.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_students_admission_id", "students", ["admission_id"], unique=True)
    op.create_index("ix_students_class_id", "students", ["class_id"])
    op.create_index("ix_students_admission_year", "students", ["admission_year"])
    op.create_index("ix_students_status", "students", ["status"])

    # Fee items and structures
    op.create_table(
        "fee_items",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("is_optional", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("applies_to", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "fee_structures",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("class_id", sa.BigInteger(), nullable=False),
        sa.Column("academic_term_id", sa.BigInteger(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["class_id"], ["school_classes.id"]),
        sa.ForeignKeyConstraint(["academic_term_id"], ["academic_terms.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("class_id", "academic_term_id", name="uq_fee_structure_class_term"),
    )
    op.create_index("ix_fee_structures_class_id", "fee_structures", ["class_id"])
    op.create_index("ix_fee_structures_academic_term_id", "fee_structures", ["academic_term_id"])
    op.create_table(
        "fee_structure_items",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("structure_id", sa.BigInteger(), nullable=False),
        sa.Column("fee_item_id", sa.BigInteger(), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["structure_id"], ["fee_structures.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("structure_id", "fee_item_id", name="uq_fee_structure_item"),
    )
    op.create_index("ix_fee_structure_items_structure_id", "fee_structure_items", ["structure_id"])

    # Payments
    op.create_table(
        "payments",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("student_id", sa.BigInteger(), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("payment_method", sa.String(20), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("academic_year", sa.String(9), nullable=False),
        sa.Column("term", sa.String(50), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("reference", sa.String(100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payments_student_id", "payments", ["student_id"])
    op.create_index("ix_payments_academic_year", "payments", ["academic_year"])
    op.create_index("ix_payments_status", "payments", ["status"])
    op.create_table(
        "payment_items",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("payment_id", sa.BigInteger(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["payment_id"], ["payments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payment_items_payment_id", "payment_items", ["payment_id"])

    # Staff
    op.create_table(
        "staff_members",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("position", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("ssnit_number", sa.String(50), nullable=True),
        sa.Column("gross_salary", sa.Numeric(15, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_staff_members_status", "staff_members", ["status"])
    op.create_table(
        "staff_arrears",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("staff_id", sa.BigInteger(), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("description", sa.String(200), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["staff_id"], ["staff_members.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_staff_arrears_staff_id", "staff_arrears", ["staff_id"])
    op.create_table(
        "staff_deductions",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("staff_id", sa.BigInteger(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["staff_id"], ["staff_members.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_staff_deductions_staff_id", "staff_deductions", ["staff_id"])

    # Payroll settings
    op.create_table(
        "payroll_settings",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("ssnit_employee_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("ssnit_employer_rate", sa.Numeric(5, 2), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "tax_brackets",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("settings_id", sa.BigInteger(), nullable=False),
        sa.Column("lower_bound", sa.Numeric(15, 2), nullable=False),
        sa.Column("upper_bound", sa.Numeric(15, 2), nullable=True),
        sa.Column("rate", sa.Numeric(5, 2), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["settings_id"], ["payroll_settings.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tax_brackets_settings_id", "tax_brackets", ["settings_id"])

    # Payroll runs
    op.create_table(
        "payroll_runs",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("employee_count", sa.Integer(), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("month", "year", name="uq_payroll_run_period"),
    )
    op.create_table(
        "payslips",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("payroll_run_id", sa.BigInteger(), nullable=False),
        sa.Column("staff_id", sa.BigInteger(), nullable=False),
        sa.Column("staff_name", sa.String(200), nullable=False),
        sa.Column("period", sa.String(7), nullable=False),
        sa.Column("gross_salary", sa.Numeric(15, 2), nullable=False),
        sa.Column("ssnit_employee", sa.Numeric(15, 2), nullable=False),
        sa.Column("ssnit_employer", sa.Numeric(15, 2), nullable=False),
        sa.Column("taxable_income", sa.Numeric(15, 2), nullable=False),
        sa.Column("income_tax", sa.Numeric(15, 2), nullable=False),
        sa.Column("net_salary", sa.Numeric(15, 2), nullable=False),
        sa.Column("deductions", sa.JSON(), nullable=False),
        sa.Column("arrears", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["payroll_run_id"], ["payroll_runs.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["staff_id"], ["staff_members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payslips_payroll_run_id", "payslips", ["payroll_run_id"])
    op.create_index("ix_payslips_staff_id", "payslips", ["staff_id"])
    op.create_index("ix_payslips_period", "payslips", ["period"])

    # Expense ledger
    op.create_table(
        "expense_categories",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("category_type", sa.String(20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", "category_type", name="uq_expense_category_name_type"),
    )
    op.create_index("ix_expense_categories_name", "expense_categories", ["name"])
    op.create_table(
        "expense_entries",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("category_id", sa.BigInteger(), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("payroll_run_id", sa.BigInteger(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["category_id"], ["expense_categories.id"]),
        sa.ForeignKeyConstraint(["payroll_run_id"], ["payroll_runs.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_expense_entries_category_id", "expense_entries", ["category_id"])
    op.create_index("ix_expense_entries_entry_date", "expense_entries", ["entry_date"])
    op.create_index("ix_expense_entries_payroll_run_id", "expense_entries", ["payroll_run_id"])


def downgrade() -> None:
    op.drop_table("expense_entries")
    op.drop_table("expense_categories")
    op.drop_table("payslips")
    op.drop_table("payroll_runs")
    op.drop_table("tax_brackets")
    op.drop_table("payroll_settings")
    op.drop_table("staff_deductions")
    op.drop_table("staff_arrears")
    op.drop_table("staff_members")
    op.drop_table("payment_items")
    op.drop_table("payments")
    op.drop_table("fee_structure_items")
    op.drop_table("fee_structures")
    op.drop_table("fee_items")
    op.drop_table("students")
    op.drop_table("school_classes")
    op.drop_table("academic_terms")
