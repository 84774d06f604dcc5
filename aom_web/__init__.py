"""Art Of Men catalog web app: admin API, QR codes and storefront."""
