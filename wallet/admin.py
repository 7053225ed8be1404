from django.contrib import admin
from wallet.models import Wallet, WalletTransaction


@admin.register(Wallet)
class WalletAdmin(admin.ModelAdmin):
    list_display = ['user', 'balance', 'currency', 'updated_at']
    search_fields = ['user__email', 'user__company_name']
    readonly_fields = ['balance', 'created_at', 'updated_at']


@admin.register(WalletTransaction)
class WalletTransactionAdmin(admin.ModelAdmin):
    list_display = ['reference', 'wallet', 'amount', 'tx_type', 'status', 'balance_after', 'created_at']
    list_filter = ['tx_type', 'status']
    search_fields = ['reference', 'wallet__user__email']
    readonly_fields = ['id', 'created_at']
