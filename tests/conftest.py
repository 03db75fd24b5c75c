import pytest

PRODUCTS_SQL = """
CREATE TABLE IF NOT EXISTS DB.SALES.PRODUCTS (
    id INT NOT NULL PRIMARY KEY,
    name VARCHAR(100) COMMENT 'Product display name',
    price DECIMAL (10, 2) DEFAULT 0,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP(),
    status STRING DEFAULT 'active',
    CONSTRAINT fk_cat FOREIGN KEY (category_id) REFERENCES DB.SALES.CATEGORIES (id) NORELY
) COMMENT = 'Products catalog' CLUSTER BY (name, price);
"""

ACTIVE_USERS_SQL = """
CREATE OR REPLACE SECURE VIEW PUBLIC.ACTIVE_USERS COMMENT = 'View of active users only' AS
-- keep me
SELECT id, name FROM users WHERE active = TRUE
"""

UPDATE_STATUS_SQL = """
CREATE OR REPLACE PROCEDURE ADMIN.UPDATE_STATUS("user_id" NUMBER(38, 0), flag BOOLEAN DEFAULT TRUE)
RETURNS STRING
LANGUAGE JAVASCRIPT
EXECUTE AS CALLER
COMMENT = 'Updates user status'
AS
$$
  var x = 1;
  return "ok";
$$
"""

PYTHON_PROC_SQL = """
CREATE PROCEDURE py_proc()
RETURNS TABLE (id NUMBER, name VARCHAR)
LANGUAGE PYTHON
RUNTIME_VERSION = '3.11'
PACKAGES = ('snowflake-snowpark-python', 'pandas')
HANDLER = 'run'
AS $$
def run(session):
    return session.table("T")
$$
"""


@pytest.fixture
def products_sql() -> str:
    return PRODUCTS_SQL


@pytest.fixture
def active_users_sql() -> str:
    return ACTIVE_USERS_SQL


@pytest.fixture
def update_status_sql() -> str:
    return UPDATE_STATUS_SQL


@pytest.fixture
def python_proc_sql() -> str:
    return PYTHON_PROC_SQL
