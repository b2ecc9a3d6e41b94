from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

User = get_user_model()

# Elevated roles are granted by an administrator, never through signup
SELF_SIGNUP_ROLES = [User.ROLE_USER, User.ROLE_STUDENT, User.ROLE_EXTERNAL]


class SignupSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8)
    name = serializers.CharField(write_only=True, min_length=2, max_length=150)
    role = serializers.ChoiceField(choices=SELF_SIGNUP_ROLES, default=User.ROLE_USER)

    class Meta:
        model = User
        fields = ['name', 'email', 'password', 'role']

    def validate_email(self, value):
        value = value.lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Este email já está cadastrado")
        return value

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        first_name, _, last_name = validated_data['name'].strip().partition(' ')
        user = User.objects.create_user(
            username=validated_data['email'],
            email=validated_data['email'],
            password=validated_data['password'],
            first_name=first_name,
            last_name=last_name,
            role=validated_data.get('role', User.ROLE_USER),
        )
        return user


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        email = attrs.get("email")
        password = attrs.get("password")

        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist:
            raise serializers.ValidationError("Credenciais inválidas")

        user = authenticate(
            username=user.username,  # Django still authenticates by username
            password=password
        )

        if not user:
            raise serializers.ValidationError("Credenciais inválidas")

        attrs["user"] = user
        return attrs
