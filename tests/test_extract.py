from sqlbridge.core.nl2sql.extract import extract_table_statements, tokenize


def test_extract_single_table():
    """Database name and the one table statement are returned as written"""
    sql = "CREATE DATABASE shop; CREATE TABLE items (id SERIAL PRIMARY KEY, name VARCHAR(100));"
    result = extract_table_statements(sql)

    assert result.ok is True
    assert result.database_name == "shop"
    assert result.table_statements == [
        "CREATE TABLE items (id SERIAL PRIMARY KEY, name VARCHAR(100));"
    ]
    assert result.message == "Found 1 table creation statements"


def test_extract_keeps_source_order():
    """A script built from a name and statements gives exactly those back"""
    t1 = "CREATE TABLE customers (id SERIAL PRIMARY KEY, email VARCHAR(255) UNIQUE);"
    t2 = "create table orders (\n  id SERIAL PRIMARY KEY,\n  customer_id INT REFERENCES customers(id)\n);"
    sql = f"CREATE DATABASE crm_2024;\n\n{t1}\n{t2}\n"

    result = extract_table_statements(sql)

    assert result.ok is True
    assert result.database_name == "crm_2024"
    assert result.table_statements == [t1, t2]


def test_extract_does_not_modify_input():
    """The script passed in is left untouched"""
    sql = "CREATE DATABASE shop; CREATE TABLE a (id INT);"
    original = str(sql)
    extract_table_statements(sql)
    assert sql == original


def test_extract_no_tables_is_still_ok():
    """A script with no tables succeeds with an empty list"""
    result = extract_table_statements("CREATE DATABASE empty_one;")

    assert result.ok is True
    assert result.database_name == "empty_one"
    assert result.table_statements == []
    assert result.message == "Found 0 table creation statements"


def test_extract_requires_sql():
    """Empty or missing SQL is refused"""
    for value in ("", None):
        result = extract_table_statements(value)
        assert result.ok is False
        assert result.error_detail == "SQL statement is required"


def test_extract_requires_create_database():
    """A script without CREATE DATABASE is refused"""
    result = extract_table_statements("CREATE TABLE a (id INT);")

    assert result.ok is False
    assert result.error_detail == "No CREATE DATABASE statement found"


def test_extract_requires_database_name():
    """CREATE DATABASE must be followed by a plain identifier"""
    for sql in ("CREATE DATABASE ;", 'CREATE DATABASE "Quoted";', "CREATE DATABASE"):
        result = extract_table_statements(sql)
        assert result.ok is False
        assert result.error_detail == "Could not extract database name"


def test_extract_ignores_semicolons_in_literals():
    """Semicolons inside string literals do not end a statement"""
    table = "CREATE TABLE notes (body TEXT DEFAULT 'a;b', tag TEXT DEFAULT 'it''s;fine');"
    result = extract_table_statements(f"CREATE DATABASE notes_db; {table}")

    assert result.table_statements == [table]


def test_extract_ignores_create_table_in_comments_and_strings():
    """CREATE TABLE inside comments or strings is not collected"""
    sql = (
        "CREATE DATABASE shop;\n"
        "-- CREATE TABLE skipped (id INT);\n"
        "/* CREATE TABLE also_skipped (id INT); */\n"
        "INSERT INTO log VALUES ('CREATE TABLE fake (x INT);');\n"
        "CREATE TABLE real_one (id INT);"
    )
    result = extract_table_statements(sql)

    assert result.table_statements == ["CREATE TABLE real_one (id INT);"]


def test_extract_dollar_quoted_body():
    """Dollar-quoted bodies are skipped as one string"""
    table = "CREATE TABLE t (id INT, note TEXT DEFAULT $$x;y$$);"
    result = extract_table_statements(f"CREATE DATABASE d; {table}")

    assert result.table_statements == [table]


def test_extract_escape_string_backslash_quote():
    """A backslash-escaped quote inside E'...' does not end the string"""
    t1 = "CREATE TABLE t (x TEXT DEFAULT E'it\\'s; fine');"
    t2 = "CREATE TABLE u (id INT);"
    result = extract_table_statements(f"CREATE DATABASE d; {t1} {t2}")

    assert result.ok is True
    assert result.table_statements == [t1, t2]


def test_extract_plain_string_after_e_column():
    """A column named e followed by a plain literal is not an escape string"""
    table = "CREATE TABLE t (e TEXT, f TEXT DEFAULT 'a\\');"
    result = extract_table_statements(f"CREATE DATABASE d; {table}")

    assert result.table_statements == [table]


def test_extract_skips_unterminated_table():
    """A table statement without its semicolon is left out"""
    sql = "CREATE DATABASE shop; CREATE TABLE a (id INT); CREATE TABLE b (id INT)"
    result = extract_table_statements(sql)

    assert result.ok is True
    assert result.table_statements == ["CREATE TABLE a (id INT);"]


def test_extract_survives_malformed_input():
    """Unterminated quotes and comments never raise"""
    for sql in (
        "CREATE DATABASE x; CREATE TABLE t (a TEXT DEFAULT 'oops);",
        "CREATE DATABASE x; /* never closed CREATE TABLE t (id INT);",
        "CREATE DATABASE x; $tag$ CREATE TABLE t (id INT);",
        "CREATE DATABASE x;;;;(((",
    ):
        result = extract_table_statements(sql)
        assert result.ok is True
        assert result.database_name == "x"
        assert result.table_statements == []


def test_tokenize_positions_cover_source():
    """Token offsets slice back to the token text"""
    sql = "CREATE TABLE t (x TEXT DEFAULT 'a;b');"
    tokens = list(tokenize(sql))

    assert [t.value for t in tokens] == [
        "CREATE", "TABLE", "t", "(", "x", "TEXT", "DEFAULT", "'a;b'", ")", ";",
    ]
    for token in tokens:
        assert sql[token.start : token.end] == token.value
