"""Session carts and the cart endpoints shared by sales and quotes."""
