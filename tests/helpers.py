from datetime import date

# a Saturday
TODAY = date(2026, 2, 7)
