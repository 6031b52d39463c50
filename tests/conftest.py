import matplotlib

# Figures are only saved to disk during tests
matplotlib.use("Agg")
