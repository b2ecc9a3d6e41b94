from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User

@admin.register(User)
class CustomUserAdmin(UserAdmin):
    list_display = ('username', 'email', 'role', 'first_name', 'last_name', 'is_staff', 'is_pre_registered')
    list_filter = ('role', 'is_staff', 'is_superuser', 'is_pre_registered', 'is_active')
    search_fields = ('username', 'email', 'first_name', 'last_name')
    fieldsets = UserAdmin.fieldsets + (
        ('Demoday', {'fields': ('role', 'is_pre_registered')}),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ('Demoday', {'fields': ('email', 'role')}),
    )
