"""Campus Ledger package.

This package is organized by feature modules (students, fees, attendance,
reports) with a thin Flask controller layer and service/repository layers.
The fee ledger and attendance status logic are plain functions and services
that do not depend on Flask or MySQL.
"""
