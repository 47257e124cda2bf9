def escape_quotes(text: str) -> str:
    """
    Экранирование для DOT и TikZ: только двойная кавычка (" -> \\").
    Остальные символы (включая не-ASCII и управляющие) передаются как есть.
    """
    if not text:
        return ""
    return text.replace('"', '\\"')
