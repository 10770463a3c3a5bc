from fx_gmc import CurrencyService, __version__, convert_currency, get_currencies

print(__version__)  # 0.1.0

# One-off conversion; fetches the GMC page for this call only
print(convert_currency(1, "USD", "IDR"))

# Reuse a single extraction across several conversions
service = CurrencyService(timeout=10)
for code in ("USD", "SGD", "EUR"):
    print(code, service.convert(100, code, "IDR", which="buy"))

# Currencies GMC does not list yield None rather than raising
print(service.convert(100, "XYZ", "IDR"))  # None

# Force a new fetch when fresher rates are needed
result = service.refresh()
print(result.updated_at)
print(result.as_dict())
# => {'currencies': {'AUD': {'buy': ..., 'sell': ...}, ...}, 'mtime': 1729308600}

# Parse a page fetched elsewhere
with open("gmc.html", encoding="utf-8") as handle:
    offline = get_currencies(handle.read())
print(offline.currencies["USD"])
