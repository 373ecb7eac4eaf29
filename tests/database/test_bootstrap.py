from classroom_attendance.database.bootstrap import _strip_create_db_and_use, iter_sql_statements


def test_splitter_ignores_semicolons_in_quotes_and_comments():
    sql = """
    -- first; table
    CREATE TABLE a (x INT);
    INSERT INTO a VALUES ('x;y'); -- trailing; comment
    INSERT INTO a VALUES ("p;q")
    """

    stmts = list(iter_sql_statements(sql))

    assert stmts == [
        "CREATE TABLE a (x INT)",
        "INSERT INTO a VALUES ('x;y')",
        'INSERT INTO a VALUES ("p;q")',
    ]


def test_strip_create_database_and_use():
    sql = "CREATE DATABASE IF NOT EXISTS foo;\nUSE foo;\nCREATE TABLE t (x INT);\n"

    assert list(iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE t (x INT)"]
