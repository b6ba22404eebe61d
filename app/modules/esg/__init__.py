"""ESG questionnaire module: auto-calculated metrics, scoring, trends and insights."""
