"""
Per-field semantic normalisation and validation of parsed rows.

- validator      required-field checks across a whole batch
- countries      free-text country name -> ISO alpha-2 code
- commodities    vendor commodity wording -> fixed taxonomy
- location       country + port -> ``{code}-{port}`` location token
- record_key     stable natural key per row for idempotent upsert
"""
