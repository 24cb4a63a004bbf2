"""Backend HyperPay: checkout hébergé, vérification du résultat et création de commande unique."""
